"""
Core module initialization.
Exports configuration, logging utilities and domain errors.
"""

from reservation_api.core.config import (
    EnvironmentMode,
    Settings,
    get_settings,
    setup_logging,
)
from reservation_api.core.errors import (
    ConflictError,
    DomainError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)

__all__ = [
    "get_settings",
    "setup_logging",
    "Settings",
    "EnvironmentMode",
    "DomainError",
    "ValidationError",
    "ConflictError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
]
