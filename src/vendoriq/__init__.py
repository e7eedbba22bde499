"""VendorIQ: vendor and supply-chain risk intelligence engine."""

__version__ = "0.1.0"
