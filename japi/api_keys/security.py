"""Security utilities for API keys.

Provides:
- Key generation (cryptographically secure, alphanumeric)
- Key hashing for storage and lookup
- Constant-time master key verification
"""

import hashlib
import secrets
import string


KEY_ALPHABET = string.ascii_letters + string.digits
API_KEY_LENGTH = 64
KEY_PREFIX_LENGTH = 8


def generate_api_key(length: int = API_KEY_LENGTH) -> str:
    """Generate a high-entropy API key.

    Args:
        length: Number of characters (default: 64, ~381 bits)

    Returns:
        Alphanumeric key
    """
    return "".join(secrets.choice(KEY_ALPHABET) for _ in range(length))


def hash_api_key(raw_key: str) -> str:
    """Hash a key for storage.

    SHA-256 is enough here: keys are random, so there is nothing to brute
    force, and lookups need a deterministic digest.
    """
    return hashlib.sha256(raw_key.encode()).hexdigest()


def key_prefix(raw_key: str) -> str:
    return raw_key[:KEY_PREFIX_LENGTH]


def verify_master_key(candidate: str | None, master_key: str | None) -> bool:
    """Check a submitted master key against the configured one.

    An unset master key never matches.
    """
    if not master_key or candidate is None:
        return False
    return secrets.compare_digest(candidate.encode(), master_key.encode())
