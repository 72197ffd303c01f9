"""
GitHub REST client for container package operations.

This module provides the registry capability the cleanup pipeline consumes:
repository lookup plus listing and deleting container package versions for
organization- and user-owned packages. It handles authentication headers,
Link-header pagination, retries of transient failures, and maps HTTP
failures onto the cleanup error types.
"""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter

from utils.error_utils import (
    ErrorCategory,
    TransportError,
    create_not_found_error,
    create_transport_error,
)
from utils.models import CONTAINER_PACKAGE_TYPE, Package, Repository, VersionId, VersionRecord
from utils.retry_utils import retry_with_backoff

logger = logging.getLogger(__name__)


def _api_message(response: requests.Response) -> Optional[str]:
    """Extract the 'message' field GitHub puts in error bodies"""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or None
    if isinstance(body, dict):
        return body.get("message")
    return None


def _segment(value: str) -> str:
    """URL-encode a path segment; container package names may contain '/'"""
    return quote(str(value), safe="")


class GitHubClient:
    """GitHub API client scoped to container package cleanup."""

    def __init__(self, config_manager, token: str, session: Optional[requests.Session] = None):
        """Initialize GitHubClient.

        Args:
            config_manager: ConfigManager instance for accessing configuration
            token: Token with read:packages and delete:packages scopes
            session: Optional pre-built session (used by tests)
        """
        self.api_url = config_manager.get_api_url()
        self.per_page = config_manager.get_per_page()
        self.timeout = config_manager.get_timeout()

        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {token}",
                "X-GitHub-Api-Version": config_manager.get_api_version(),
                "User-Agent": "untagged-image-cleaner",
            }
        )
        if session is None:
            pool_maxsize = config_manager.get_pool_maxsize()
            adapter = HTTPAdapter(pool_connections=pool_maxsize, pool_maxsize=pool_maxsize)
            self.session.mount("https://", adapter)
            self.session.mount("http://", adapter)

        backoff = dict(
            max_retries=config_manager.get_max_retries(),
            initial_delay=config_manager.get_retry_initial_delay(),
            max_delay=config_manager.get_retry_max_delay(),
            exponential_base=config_manager.get_retry_exponential_base(),
            jitter=config_manager.get_retry_jitter(),
        )
        self._send = retry_with_backoff(**backoff)(self._send_once)
        # A DELETE that timed out or got a 5xx may still have removed the version,
        # and resending it would then fail with a 404.
        self._send_delete = retry_with_backoff(retryable_errors=[], **backoff)(self._send_once)

    def _url(self, path: str) -> str:
        return f"{self.api_url}{path}"

    def _send_once(self, method: str, url: str, operation: str, params: Optional[Dict[str, Any]] = None):
        """Issue one HTTP request; raises for every non-2xx answer"""
        logger.debug(f"{method} {url} params={params}")
        response = self.session.request(method, url, params=params, timeout=self.timeout)

        if response.status_code == 404:
            raise create_not_found_error(operation, url, _api_message(response))
        if response.status_code >= 400:
            raise create_transport_error(
                operation, url, status_code=response.status_code, api_message=_api_message(response)
            )
        return response

    def _request(self, method: str, url: str, operation: str, params: Optional[Dict[str, Any]] = None):
        try:
            send = self._send_delete if method == "DELETE" else self._send
            return send(method, url, operation, params)
        except requests.RequestException as e:
            raise create_transport_error(operation, url, error=e) from e

    @staticmethod
    def _parse_json(response: requests.Response, url: str, operation: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(
                f"Registry API returned a non-JSON body: {operation}",
                status_code=response.status_code,
                category=ErrorCategory.NETWORK,
                details={"url": url},
            ) from e

    def _get_json(self, path: str, operation: str) -> Any:
        url = self._url(path)
        return self._parse_json(self._request("GET", url, operation), url, operation)

    def _get_all_pages(self, path: str, operation: str, params: Optional[Dict[str, Any]] = None) -> List[Dict]:
        """GET every page of a list endpoint by following Link rel="next"."""
        items: List[Dict] = []
        url = self._url(path)
        page_params = dict(params or {}, per_page=self.per_page)

        while url:
            response = self._request("GET", url, operation, params=page_params)
            page = self._parse_json(response, url, operation)
            if not isinstance(page, list):
                raise TransportError(
                    f"Registry API returned an unexpected payload: {operation}",
                    status_code=response.status_code,
                    category=ErrorCategory.NETWORK,
                    details={"url": url, "payload_type": type(page).__name__},
                )
            items.extend(page)

            # The next link already carries the query string
            url = response.links.get("next", {}).get("url")
            page_params = None

        return items

    # Repositories
    def get_repository(self, owner: str, name: str) -> Repository:
        payload = self._get_json(
            f"/repos/{_segment(owner)}/{_segment(name)}", f"get repository {owner}/{name}"
        )
        return Repository.from_api(payload)

    # Packages
    def list_org_packages(self, org: str, package_type: str = CONTAINER_PACKAGE_TYPE) -> List[Package]:
        items = self._get_all_pages(
            f"/orgs/{_segment(org)}/packages",
            f"list {package_type} packages for organization {org}",
            params={"package_type": package_type},
        )
        return [Package.from_api(item) for item in items]

    def list_user_packages(self, user: str, package_type: str = CONTAINER_PACKAGE_TYPE) -> List[Package]:
        items = self._get_all_pages(
            f"/users/{_segment(user)}/packages",
            f"list {package_type} packages for user {user}",
            params={"package_type": package_type},
        )
        return [Package.from_api(item) for item in items]

    # Package versions
    def list_org_package_versions(
        self, org: str, package_name: str, package_type: str = CONTAINER_PACKAGE_TYPE
    ) -> List[VersionRecord]:
        items = self._get_all_pages(
            f"/orgs/{_segment(org)}/packages/{package_type}/{_segment(package_name)}/versions",
            f"list versions of {package_type} package {package_name} for organization {org}",
        )
        return [VersionRecord.from_api(item) for item in items]

    def list_user_package_versions(
        self, user: str, package_name: str, package_type: str = CONTAINER_PACKAGE_TYPE
    ) -> List[VersionRecord]:
        items = self._get_all_pages(
            f"/users/{_segment(user)}/packages/{package_type}/{_segment(package_name)}/versions",
            f"list versions of {package_type} package {package_name} for user {user}",
        )
        return [VersionRecord.from_api(item) for item in items]

    def delete_org_package_version(
        self, org: str, package_name: str, package_type: str, version_id: VersionId
    ) -> None:
        self._request(
            "DELETE",
            self._url(
                f"/orgs/{_segment(org)}/packages/{package_type}/{_segment(package_name)}/versions/{_segment(version_id)}"
            ),
            f"delete version {version_id} of {package_type} package {package_name} for organization {org}",
        )

    def delete_user_package_version(
        self, user: str, package_name: str, package_type: str, version_id: VersionId
    ) -> None:
        self._request(
            "DELETE",
            self._url(
                f"/users/{_segment(user)}/packages/{package_type}/{_segment(package_name)}/versions/{_segment(version_id)}"
            ),
            f"delete version {version_id} of {package_type} package {package_name} for user {user}",
        )

    def close(self) -> None:
        self.session.close()
