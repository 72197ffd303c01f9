#!/usr/bin/env python3
"""
Delete untagged container package versions linked to a repository.

Workflow:
- Resolve the owner/name repository to its owner login and owner type
- List the owner's container packages and keep those linked to the repository
- Fetch every version of every package (one concurrent request stream per
  package) and keep the versions with no tags
- Delete those versions (one concurrent request per version)
- Log the ids of the removed versions

Both fan-outs are all-or-fail: every launched call is awaited and the first
failure is raised for the whole stage. Deletions that completed before a
failure are not rolled back.
"""

import sys
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, List, Optional, Sequence, TypeVar

# Add parent directory to path for imports
_parent_dir = Path(__file__).parent.parent.absolute()
if str(_parent_dir) not in sys.path:
    sys.path.insert(0, str(_parent_dir))

from utils.logging_utils import get_logger
from utils.models import DeletionResult, Package, PackageVersion, Repository, RepositoryRef, VersionId
from utils.owner_scope import scope_for

logger = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def fan_out(
    func: Callable[[T], R],
    items: Sequence[T],
    max_workers: int = 0,
    in_input_order: bool = True,
) -> List[R]:
    """Run func on every item concurrently and return all results, or raise.

    Args:
        func: Operation to run per item
        items: Items to process
        max_workers: Thread cap; 0 starts one thread per item
        in_input_order: Return results in the order of items instead of completion order

    Raises:
        The first exception raised by any call, once every started call has finished.
    """
    items = list(items)
    if not items:
        return []

    workers = min(max_workers, len(items)) if max_workers > 0 else len(items)
    slots: List[Optional[R]] = [None] * len(items)
    completed: List[R] = []
    first_error: Optional[BaseException] = None

    with ThreadPoolExecutor(max_workers=workers) as executor:
        future_to_index = {executor.submit(func, item): index for index, item in enumerate(items)}

        for future in as_completed(future_to_index):
            if future.cancelled():
                continue
            error = future.exception()
            if error is not None:
                if first_error is None:
                    first_error = error
                    # Only matters when capped: queued calls are not started after a failure
                    for pending in future_to_index:
                        pending.cancel()
                continue
            result = future.result()
            slots[future_to_index[future]] = result
            completed.append(result)

    if first_error is not None:
        raise first_error

    return slots if in_input_order else completed


class UntaggedVersionCleaner:
    """Removes untagged container versions from the packages linked to one repository"""

    def __init__(self, client, max_workers: int = 0):
        """
        Args:
            client: Registry client (see utils.github_client.GitHubClient)
            max_workers: Concurrency cap for the per-package and per-version fan-outs; 0 means uncapped
        """
        self.client = client
        self.max_workers = max_workers

    def resolve_repository(self, identifier: str) -> Repository:
        """Parse owner/name and fetch the repository.

        Raises:
            InvalidInputError: before any request when the identifier is malformed
            NotFoundError, TransportError: when the lookup fails
        """
        ref = RepositoryRef.parse(identifier)
        logger.info(f"Fetching the `{ref.full_name}` repository...")
        repository = self.client.get_repository(ref.owner, ref.name)
        logger.info(f"Repository {repository.full_name} is owned by {repository.owner.type} {repository.owner.login}")
        return repository

    def get_repository_packages(self, repository: Repository) -> List[Package]:
        """List the owner's container packages that are linked to repository."""
        scope = scope_for(repository.owner, "repository")

        logger.info("Fetching the repository's linked container packages...")
        packages = scope.list_packages(self.client)
        linked = [p for p in packages if p.repository_full_name == repository.full_name]

        logger.info(
            f"Found {len(linked)} linked container package(s) "
            f"out of {len(packages)} owned by {repository.owner.login}"
        )
        for package in linked:
            logger.debug(f"  - {package.name}")
        return linked

    def _get_untagged_package_versions(self, package: Package) -> List[PackageVersion]:
        scope = scope_for(package.owner, "package")
        records = scope.list_package_versions(self.client, package.name)
        untagged = [PackageVersion.from_record(r, package) for r in records if r.is_untagged]
        logger.info(f"  {package.name}: {len(untagged)} untagged of {len(records)} version(s)")
        return untagged

    def get_untagged_versions(self, packages: Sequence[Package]) -> List[PackageVersion]:
        """Fetch all versions of every package concurrently and keep the untagged ones.

        Results are flattened in package order. Any failed fetch fails the whole
        call and nothing is returned.
        """
        logger.info("Fetching the packages' untagged versions...")
        per_package = fan_out(self._get_untagged_package_versions, packages, self.max_workers)
        return [version for versions in per_package for version in versions]

    def _delete_version(self, version: PackageVersion) -> DeletionResult:
        scope = scope_for(version.package.owner, "version")
        scope.delete_package_version(self.client, version.package.name, version.id)
        logger.info(f"  ✓ Deleted version {version.id} ({version.name}) of {version.package.name}")
        return DeletionResult(version_id=version.id, package_name=version.package.name)

    def delete_versions(self, versions: Sequence[PackageVersion]) -> List[DeletionResult]:
        """Delete every version concurrently; results come back in completion order."""
        if not versions:
            return []

        logger.info("Deleting the packages' untagged versions...")
        return fan_out(self._delete_version, versions, self.max_workers, in_input_order=False)

    def run(self, identifier: str) -> List[VersionId]:
        """Run the whole pipeline and report; returns the deleted version ids."""
        repository = self.resolve_repository(identifier)
        packages = self.get_repository_packages(repository)
        versions = self.get_untagged_versions(packages)
        results = self.delete_versions(versions)

        deleted_version_ids = [result.version_id for result in results]
        report_deleted_versions(deleted_version_ids)
        return deleted_version_ids


def report_deleted_versions(deleted_version_ids: Sequence[VersionId]) -> None:
    logger.info("👍 Success!")

    if deleted_version_ids:
        ids = ", ".join(str(version_id) for version_id in deleted_version_ids)
        logger.info(f"The following untagged versions were removed: {ids}.")
    else:
        logger.info("There were no untagged versions to remove.")
