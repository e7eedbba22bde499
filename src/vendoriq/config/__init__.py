"""Configuration for VendorIQ."""

from vendoriq.config.settings import EngineConfig, Settings, get_settings

__all__ = ["EngineConfig", "Settings", "get_settings"]
