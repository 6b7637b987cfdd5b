"""Shared utilities for the WellWatch platform."""
from .pii import hash_pii, configure_pii_salt, is_pii_salt_configured

__all__ = ["hash_pii", "configure_pii_salt", "is_pii_salt_configured"]
