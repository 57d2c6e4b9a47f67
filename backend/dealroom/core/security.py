"""Security utilities for API key and invitation token generation."""

import secrets
import hashlib


def generate_api_key() -> str:
    """
    Generate a new API key with the format: dlrm_sk_{hex}.

    Returns:
        str: API key in format dlrm_sk_<64 hex characters>
    """
    random_hex = secrets.token_hex(32)  # 32 bytes = 64 hex characters
    return f"dlrm_sk_{random_hex}"


def hash_api_key(api_key: str) -> str:
    """
    Hash an API key using SHA-256.

    Args:
        api_key: The plaintext API key

    Returns:
        str: SHA-256 hash of the API key as hex string
    """
    return hashlib.sha256(api_key.encode()).hexdigest()


def verify_api_key(provided_key: str, stored_hash: str) -> bool:
    """Constant-time check of a provided API key against its stored hash."""
    return secrets.compare_digest(hash_api_key(provided_key), stored_hash)


def generate_invitation_token() -> str:
    """URL-safe token embedded in invitation links."""
    return secrets.token_urlsafe(32)
