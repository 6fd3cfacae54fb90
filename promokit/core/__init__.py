"""Core module - config, database, storage, queue, exceptions."""

from promokit.core.config import get_settings, Settings
from promokit.core.exceptions import (
    AppException,
    NotFoundException,
    UnauthorizedException,
    BadRequestException,
    PipelineError,
)

__all__ = [
    "get_settings",
    "Settings",
    "AppException",
    "NotFoundException",
    "UnauthorizedException",
    "BadRequestException",
    "PipelineError",
]
