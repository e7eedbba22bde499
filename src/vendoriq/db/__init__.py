"""Relational persistence for VendorIQ."""
