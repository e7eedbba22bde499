"""Utility modules for VendorIQ."""

from vendoriq.utils.exceptions import (
    ConfigurationError,
    RepositoryError,
    VendorIQError,
)

__all__ = [
    "VendorIQError",
    "RepositoryError",
    "ConfigurationError",
]
