"""
Error types shared across voldash.
"""

from typing import Optional


class VoldashError(Exception):
    """Base class for voldash errors."""

    pass


class ValidationError(VoldashError):
    """Raised when a required user-supplied field is empty or invalid."""

    pass


class InvalidArgument(VoldashError):
    """Raised for malformed arguments such as an unparseable date."""

    pass


class NotFound(VoldashError):
    """Raised when a rule id is not in the catalog."""

    pass


class RemoteStoreError(VoldashError):
    """Raised for any failure reported by the backing store."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        detail: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail

    def __str__(self) -> str:
        text = super().__str__()
        if self.status_code is not None:
            text = f"{text} (HTTP {self.status_code})"
        if self.detail:
            text = f"{text}: {self.detail}"
        return text
