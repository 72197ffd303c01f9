"""
Domain records for the untagged version cleanup pipeline.

Each record is built once from a GitHub REST payload and never mutated.
Owner types are kept as the raw API string so an unrecognized value reaches
the owner-scope dispatch, where it is rejected.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from utils.error_utils import create_invalid_repository_error

CONTAINER_PACKAGE_TYPE = "container"

# GitHub returns integer ids; callers may use any hashable id
VersionId = Union[int, str]


class OwnerKind(str, Enum):
    """Account types that can own a repository or package"""

    ORGANIZATION = "Organization"
    USER = "User"


@dataclass(frozen=True)
class Owner:
    login: str
    type: str

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Owner":
        return cls(login=payload["login"], type=payload.get("type"))


@dataclass(frozen=True)
class RepositoryRef:
    """An owner/name pair parsed from a repository identifier"""

    owner: str
    name: str

    @classmethod
    def parse(cls, identifier: str) -> "RepositoryRef":
        """Split 'owner/name' on the first slash.

        Raises:
            InvalidInputError: unless there are exactly two non-empty segments
        """
        if not isinstance(identifier, str):
            raise create_invalid_repository_error(identifier)

        owner, sep, name = identifier.strip().partition("/")
        if not sep or not owner or not name or "/" in name:
            raise create_invalid_repository_error(identifier)
        return cls(owner=owner, name=name)

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True)
class Repository:
    full_name: str
    owner: Owner

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Repository":
        return cls(full_name=payload["full_name"], owner=Owner.from_api(payload["owner"]))


@dataclass(frozen=True)
class Package:
    """A container package and the repository it is linked to (if any)"""

    name: str
    owner: Owner
    repository_full_name: Optional[str] = None

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Package":
        repository = payload.get("repository") or {}
        return cls(
            name=payload["name"],
            owner=Owner.from_api(payload["owner"]),
            repository_full_name=repository.get("full_name"),
        )


@dataclass(frozen=True)
class VersionRecord:
    """A package version as returned by the registry, without its package"""

    id: VersionId
    name: str
    tags: Tuple[str, ...] = ()

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "VersionRecord":
        container = (payload.get("metadata") or {}).get("container") or {}
        return cls(
            id=payload["id"],
            name=payload.get("name", ""),
            tags=tuple(container.get("tags") or ()),
        )

    @property
    def is_untagged(self) -> bool:
        return len(self.tags) == 0


@dataclass(frozen=True)
class PackageVersion:
    """A version together with the package it belongs to"""

    id: VersionId
    name: str
    tags: Tuple[str, ...]
    package: Package

    @classmethod
    def from_record(cls, record: VersionRecord, package: Package) -> "PackageVersion":
        return cls(id=record.id, name=record.name, tags=record.tags, package=package)


@dataclass(frozen=True)
class DeletionResult:
    version_id: VersionId
    package_name: str
