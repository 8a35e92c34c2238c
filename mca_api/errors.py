"""
HTTP-facing errors raised by the authorization layer.

They subclass `HTTPException` so FastAPI renders them with its default handler,
the same way the auth helpers raise 401/403 directly.
"""

from __future__ import annotations

from fastapi import HTTPException, status


class Forbidden(HTTPException):
    """The principal's scope excludes the requested or fetched record."""

    def __init__(self, label: str, detail: str | None = None) -> None:
        self.label = label
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail or f"You do not have permission to access this {label}",
        )


class NotFound(HTTPException):
    def __init__(self, label: str) -> None:
        self.label = label
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label.capitalize()} not found")


class ScopeResolutionFailure(HTTPException):
    """A relationship lookup needed to resolve scope failed."""

    def __init__(self, detail: str = "Unable to resolve access scope") -> None:
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
