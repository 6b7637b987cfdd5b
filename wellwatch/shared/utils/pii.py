"""Identifier hashing for logs and alert events.

Health records belong to elderly users and are personal data. User
identifiers are hashed before they reach logs or the alert stream.
"""
import hashlib
import logging
from typing import Optional

logger = logging.getLogger(__name__)

MIN_SALT_LENGTH = 32

# Loaded from PII_HASH_SALT (or Secrets Manager) at service startup
_PII_SALT: Optional[str] = None


def configure_pii_salt(salt: str) -> None:
    """Set the process-wide hashing salt.

    Args:
        salt: Secret salt, at least 32 characters

    Raises:
        ValueError: If salt is empty or too short
    """
    global _PII_SALT
    if not salt or len(salt) < MIN_SALT_LENGTH:
        logger.critical(
            "PII_SALT_CONFIGURATION_FAILED",
            extra={"reason": "salt_too_short", "min_length": MIN_SALT_LENGTH}
        )
        raise ValueError(f"PII salt must be at least {MIN_SALT_LENGTH} characters")

    _PII_SALT = salt
    logger.info("PII_SALT_CONFIGURED", extra={"salt_length": len(salt)})


def is_pii_salt_configured() -> bool:
    return _PII_SALT is not None


def hash_pii(value: str) -> str:
    """Return a salted SHA-256 hex digest of a user identifier.

    Raises:
        RuntimeError: If the salt has not been configured

    Example:
        >>> hash_pii("user-123")
        '9f2c...'  # 64-char hex string
    """
    if _PII_SALT is None:
        logger.critical(
            "PII_HASH_FAILED",
            extra={"reason": "salt_not_configured", "action": "call configure_pii_salt()"}
        )
        raise RuntimeError("PII salt not configured. Call configure_pii_salt() first.")

    return hashlib.sha256(f"{_PII_SALT}{value}".encode()).hexdigest()
