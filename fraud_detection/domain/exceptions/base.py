"""Base domain exception."""

from typing import Any


class DomainException(Exception):
    """
    Base exception for all fraud-detection domain errors.

    Each subclass carries a stable machine-readable ``code`` next to the
    human-readable ``message``; the API layer renders both.
    """

    def __init__(self, message: str, code: str = "DOMAIN_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Error body shared by every API error response."""
        return {"error": self.code, "message": self.message}
