"""Exception hierarchy for hosts file ingestion, writing and profile storage."""

from __future__ import annotations


class SaneHostsError(Exception):
    """Base class for every error raised by sanehosts."""


class IngestError(SaneHostsError):
    """Fetching or parsing an external hosts source failed."""

    recovery_suggestion: str | None = "Make sure the URL points to a valid hosts file"


class InvalidURLError(IngestError):
    def __init__(self, url: str) -> None:
        super().__init__(f"Invalid URL: {url}")
        self.url = url


class NetworkError(IngestError):
    recovery_suggestion = "Check your internet connection and try again"

    def __init__(self, reason: str) -> None:
        super().__init__(f"Network error: {reason}")
        self.reason = reason


class HTTPStatusError(IngestError):
    recovery_suggestion = "The server returned an error. Try again later."

    def __init__(self, status_code: int, url: str = "") -> None:
        super().__init__(f"HTTP error {status_code}")
        self.status_code = status_code
        self.url = url


class IngestTimeoutError(IngestError):
    recovery_suggestion = "Check your internet connection and try again"

    def __init__(self, message: str = "Request timed out") -> None:
        super().__init__(message)


class IngestCancelledError(IngestError):
    recovery_suggestion = None

    def __init__(self, message: str = "Import was cancelled") -> None:
        super().__init__(message)


class NoValidEntriesError(IngestError):
    def __init__(self, message: str = "No valid hosts entries found") -> None:
        super().__init__(message)


class HostsWriteError(SaneHostsError):
    """The privileged write of the system hosts file failed."""


class DNSFlushError(SaneHostsError):
    """Flushing the DNS cache after a write failed."""


class ProfileError(SaneHostsError):
    """Unknown or conflicting profile in the profile store."""
