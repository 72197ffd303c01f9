"""
Error types for the untagged version cleanup pipeline.

Every failure the pipeline can hit is a CleanupError, so the entry point has
a single type to catch. Each error carries suggested fixes so the message
that ends up in the CI log tells the user what to check next.
"""

from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCategory(Enum):
    """What kind of problem an error reports, used to pick suggestions"""
    AUTHENTICATION = "authentication"
    CONFIGURATION = "configuration"
    NETWORK = "network"
    PERMISSION = "permission"
    RATE_LIMIT = "rate_limit"
    RESOURCE = "resource"
    UNSUPPORTED = "unsupported"
    UNKNOWN = "unknown"


class ActionableError(Exception):
    """Error whose message lists suggested fixes and context for the CI log"""

    def __init__(self, message: str, category: ErrorCategory = ErrorCategory.UNKNOWN,
                 suggestions: Optional[List[str]] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.category = category
        self.suggestions = suggestions or []
        self.details = details or {}
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format the complete error message with suggestions"""
        lines = [f"❌ {self.message}"]

        if self.suggestions:
            lines.append("\n💡 Suggested fixes:")
            for i, suggestion in enumerate(self.suggestions, 1):
                lines.append(f"   {i}. {suggestion}")

        if self.details:
            lines.append("\n📋 Additional details:")
            for key, value in self.details.items():
                lines.append(f"   {key}: {value}")

        return "\n".join(lines)


class CleanupError(ActionableError):
    """Base class for every error that aborts a cleanup run"""


class InvalidInputError(CleanupError):
    """The repository identifier is not of the form owner/name"""


class NotFoundError(CleanupError):
    """The registry answered 404 for a repository or package lookup"""


class TransportError(CleanupError):
    """Network, authorization or any other non-404 registry failure"""

    def __init__(self, message: str, status_code: Optional[int] = None, **kwargs):
        self.status_code = status_code
        super().__init__(message, **kwargs)


class UnknownOwnerKindError(CleanupError):
    """An owner type other than Organization or User was encountered"""

    def __init__(self, owner_type: Any, subject: str, **kwargs):
        self.owner_type = owner_type
        self.subject = subject
        super().__init__(f"The {subject}'s owner type is unknown: {owner_type!r}", **kwargs)


class ConfigValidationError(CleanupError):
    """Raised when configuration validation fails"""


def create_invalid_repository_error(identifier: Any) -> InvalidInputError:
    """Create actionable error for a malformed repository identifier"""
    return InvalidInputError(
        message=f"Invalid repository identifier: {identifier!r}",
        category=ErrorCategory.CONFIGURATION,
        suggestions=[
            "Pass the repository as 'owner/name', e.g. 'octo-org/octo-repo'",
            "In a workflow, use ${{ github.repository }} for the current repository",
        ],
        details={"expected_format": "owner/name"},
    )


def create_not_found_error(operation: str, url: str, api_message: Optional[str] = None) -> NotFoundError:
    """Create actionable error for a 404 from the registry API"""
    return NotFoundError(
        message=f"Not found: {operation}",
        category=ErrorCategory.RESOURCE,
        suggestions=[
            "Check the repository owner and name spelling",
            "Private repositories and packages return 404 when the token cannot see them",
            "Verify the token has the read:packages scope",
        ],
        details={"url": url, "api_message": api_message or "Not Found"},
    )


def create_transport_error(operation: str, url: str, error: Optional[Exception] = None,
                           status_code: Optional[int] = None, api_message: Optional[str] = None) -> TransportError:
    """Create actionable error for a failed registry API call"""
    if status_code == 401:
        category = ErrorCategory.AUTHENTICATION
        suggestions = [
            "Verify the token is valid and has not expired",
            "Check that INPUT_GH_TOKEN or GH_TOKEN holds the whole token",
        ]
    elif status_code == 403:
        category = ErrorCategory.PERMISSION
        suggestions = [
            "The token needs read:packages to list and delete:packages to delete versions",
            "For GITHUB_TOKEN, grant 'packages: write' in the workflow permissions",
            "Organization packages also need admin access to the package",
        ]
    elif status_code == 429:
        category = ErrorCategory.RATE_LIMIT
        suggestions = [
            "Wait for the rate limit window to reset before retrying",
            "Lower analysis.max_workers to reduce request bursts",
        ]
    else:
        category = ErrorCategory.NETWORK
        suggestions = [
            "Check network connectivity to the GitHub API",
            "Verify github.api_url points at a reachable API endpoint",
            "Check https://www.githubstatus.com for ongoing incidents",
        ]

    details: Dict[str, Any] = {"url": url}
    if status_code is not None:
        details["status_code"] = status_code
    if api_message:
        details["api_message"] = api_message
    if error is not None:
        details["error_type"] = type(error).__name__
        details["error_message"] = str(error)

    reason = f"HTTP {status_code}" if status_code is not None else "request failed"
    return TransportError(
        f"Registry API call failed ({reason}): {operation}",
        status_code=status_code,
        category=category,
        suggestions=suggestions,
        details=details,
    )


def create_unknown_owner_kind_error(owner_type: Any, subject: str, login: Optional[str] = None) -> UnknownOwnerKindError:
    """Create actionable error for an owner type outside Organization/User"""
    details: Dict[str, Any] = {"owner_type": owner_type}
    if login:
        details["owner_login"] = login
    return UnknownOwnerKindError(
        owner_type,
        subject,
        category=ErrorCategory.UNSUPPORTED,
        suggestions=[
            "Only repositories owned by an organization or a user are supported",
            "Report the owner type so support for it can be added",
        ],
        details=details,
    )


def create_config_error(field: str, value: Any, reason: str) -> ConfigValidationError:
    """Create actionable error for configuration validation failures"""
    suggestions = [
        f"Check the '{field}' value in config.yaml",
        "Verify the value matches the expected format",
        "Check config-example.yaml for the expected format",
    ]

    if "url" in field.lower():
        suggestions.insert(1, "URL should be in format: https://hostname[/path]")
    elif "timeout" in field.lower() or "delay" in field.lower():
        suggestions.insert(1, "Time values must be positive numbers")

    return ConfigValidationError(
        message=f"Configuration error: Invalid value for '{field}'",
        category=ErrorCategory.CONFIGURATION,
        suggestions=suggestions,
        details={
            "field": field,
            "value": value,
            "reason": reason
        }
    )
