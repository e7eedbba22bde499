"""Custom exceptions for VendorIQ."""


class VendorIQError(Exception):
    """Base exception for all VendorIQ errors."""

    pass


class RepositoryError(VendorIQError):
    """Transport or storage failure raised by a history repository."""

    pass


class ConfigurationError(VendorIQError):
    """Error in configuration or settings."""

    pass
