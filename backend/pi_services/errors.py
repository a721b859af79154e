"""Error types shared by the services and the HTTP layer."""

from typing import Any, Optional


class DashboardError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_body(self) -> Any:
        return {"error": self.message}


class ValidationError(DashboardError):
    """Raised when request input is missing or malformed."""

    status_code = 400


class UpstreamError(DashboardError):
    """Raised when Jira answers with a non-success status.

    The upstream status and body are passed through to the caller.
    """

    def __init__(self, status_code: Optional[int], body: Any = None):
        self.status_code = status_code or 500
        self.body = body
        super().__init__(f"Jira API error: {self.status_code}")

    @property
    def upstream_message(self) -> str:
        """First human-readable message Jira put in the error body."""
        if isinstance(self.body, dict):
            messages = self.body.get("errorMessages") or []
            if messages:
                return str(messages[0])
            if self.body.get("message"):
                return str(self.body["message"])
        elif isinstance(self.body, str) and self.body:
            return self.body
        return self.message

    def to_body(self) -> Any:
        if isinstance(self.body, (dict, list)):
            return self.body
        return {"error": self.body or self.message}


class NetworkError(DashboardError):
    """Raised when Jira could not be reached at all (timeout, DNS, refused)."""

    def __init__(self, reason: str):
        super().__init__(f"Failed to connect to Jira: {reason}")


class StorageError(DashboardError):
    """Raised when the notes file cannot be read or written."""
