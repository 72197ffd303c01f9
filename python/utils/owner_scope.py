"""
Owner-scoped access to container packages.

Organization- and user-owned packages live under different API endpoints.
Every pipeline stage asks scope_for() for the owner's scope and calls its
methods, so the Organization/User branch exists in one place only.
"""

from abc import ABC, abstractmethod
from typing import List

from utils.error_utils import create_unknown_owner_kind_error
from utils.models import CONTAINER_PACKAGE_TYPE, Owner, OwnerKind, Package, VersionId, VersionRecord


class OwnerScope(ABC):
    """Container package operations for one owning account"""

    kind: OwnerKind

    def __init__(self, login: str):
        self.login = login

    @abstractmethod
    def list_packages(self, client) -> List[Package]:
        """All container packages owned by this account"""

    @abstractmethod
    def list_package_versions(self, client, package_name: str) -> List[VersionRecord]:
        """Every version of one of this account's container packages"""

    @abstractmethod
    def delete_package_version(self, client, package_name: str, version_id: VersionId) -> None:
        """Delete one version of one of this account's container packages"""

    def __eq__(self, other) -> bool:
        return type(self) is type(other) and self.login == other.login

    def __hash__(self) -> int:
        return hash((type(self), self.login))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.login!r})"


class OrganizationScope(OwnerScope):
    kind = OwnerKind.ORGANIZATION

    def list_packages(self, client) -> List[Package]:
        return client.list_org_packages(self.login, CONTAINER_PACKAGE_TYPE)

    def list_package_versions(self, client, package_name: str) -> List[VersionRecord]:
        return client.list_org_package_versions(self.login, package_name, CONTAINER_PACKAGE_TYPE)

    def delete_package_version(self, client, package_name: str, version_id: VersionId) -> None:
        client.delete_org_package_version(self.login, package_name, CONTAINER_PACKAGE_TYPE, version_id)


class UserScope(OwnerScope):
    kind = OwnerKind.USER

    def list_packages(self, client) -> List[Package]:
        return client.list_user_packages(self.login, CONTAINER_PACKAGE_TYPE)

    def list_package_versions(self, client, package_name: str) -> List[VersionRecord]:
        return client.list_user_package_versions(self.login, package_name, CONTAINER_PACKAGE_TYPE)

    def delete_package_version(self, client, package_name: str, version_id: VersionId) -> None:
        client.delete_user_package_version(self.login, package_name, CONTAINER_PACKAGE_TYPE, version_id)


_SCOPES = {
    OwnerKind.ORGANIZATION: OrganizationScope,
    OwnerKind.USER: UserScope,
}


def scope_for(owner: Owner, subject: str) -> OwnerScope:
    """Return the scope matching owner.type.

    Args:
        owner: The owning account
        subject: What the owner belongs to ("repository", "package", "version"), for the error message

    Raises:
        UnknownOwnerKindError: for any owner type other than Organization or User
    """
    try:
        kind = OwnerKind(owner.type)
    except ValueError:
        raise create_unknown_owner_kind_error(owner.type, subject, owner.login) from None
    return _SCOPES[kind](owner.login)
