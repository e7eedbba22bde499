"""Core infrastructure: logging and engine exceptions."""

from vendoriq.core.exceptions import (
    EntityNotFoundError,
    InputValidationError,
    RepositoryUnavailableError,
)
from vendoriq.core.logging import LogContext, get_logger, setup_logging

__all__ = [
    "EntityNotFoundError",
    "InputValidationError",
    "RepositoryUnavailableError",
    "LogContext",
    "get_logger",
    "setup_logging",
]
