# devtoolkit/utils/security.py
"""Security utilities for the DevToolkit account service
bcrypt password hashing and random single-use tokens
"""
import re
import secrets

import bcrypt

DEFAULT_ROUNDS = 12

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """
    Hash password using bcrypt

    Args:
        password: Plain text password
        rounds: bcrypt cost factor

    Returns:
        bcrypt hash string, salt embedded
    """
    hashed = bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt(rounds=rounds))
    return hashed.decode('utf-8')


def verify_password(password: str, stored_hash: str) -> bool:
    """
    Verify password against stored hash using constant-time comparison

    Args:
        password: Plain text password to verify
        stored_hash: bcrypt hash string

    Returns:
        True if password matches, False otherwise
    """
    if not isinstance(password, str):
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), stored_hash.encode('utf-8'))
    except ValueError:
        # Malformed stored hash
        return False


def generate_secure_token(length: int = 32) -> str:
    """
    Generate cryptographically secure random token

    Args:
        length: Number of bytes (will be hex-encoded, so output is 2x length)

    Returns:
        Hex-encoded secure random token
    """
    return secrets.token_hex(length)


def is_valid_email(email: str) -> bool:
    """Basic local@domain.tld shape check"""
    return bool(email) and EMAIL_PATTERN.match(email) is not None
