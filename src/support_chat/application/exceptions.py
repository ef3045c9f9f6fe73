from __future__ import annotations


class AppError(Exception):
    """Base application error."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class NotFoundError(AppError):
    pass


class ForbiddenError(AppError):
    pass


class ConflictError(AppError):
    pass


class ValidationError(AppError):
    pass


class QueryTimeoutError(AppError):
    """A bounded query ran past its deadline."""


class UpstreamError(AppError):
    """Storage or transport failure; detail is logged, never returned to callers."""
