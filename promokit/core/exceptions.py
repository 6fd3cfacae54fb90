"""
Custom application exceptions.

HTTP exceptions are raised by the API; PipelineError and its subclasses are
raised inside job handlers and end up as the job's error message.
"""

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base application exception."""

    def __init__(self, detail: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR):
        super().__init__(status_code=status_code, detail=detail)


class NotFoundException(AppException):
    """Resource not found exception."""

    def __init__(self, detail: str = "Resource not found"):
        super().__init__(detail=detail, status_code=status.HTTP_404_NOT_FOUND)


class UnauthorizedException(AppException):
    """Unauthorized access exception."""

    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(detail=detail, status_code=status.HTTP_401_UNAUTHORIZED)


class ForbiddenException(AppException):
    """Forbidden exception."""

    def __init__(self, detail: str = "Forbidden"):
        super().__init__(detail=detail, status_code=status.HTTP_403_FORBIDDEN)


class BadRequestException(AppException):
    """Bad request exception."""

    def __init__(self, detail: str = "Bad request"):
        super().__init__(detail=detail, status_code=status.HTTP_400_BAD_REQUEST)


class PipelineError(Exception):
    """Base class for failures inside a job handler."""


class RecordNotFoundError(PipelineError):
    """A promo/item/upload referenced by a job does not exist for its account."""


class ScrapeError(PipelineError):
    """A third-party page could not be fetched or parsed."""


class RenderError(PipelineError):
    """The headless browser failed or timed out."""


class UnsupportedSpreadsheetError(PipelineError):
    """An upload could not be read as CSV or XLSX."""
