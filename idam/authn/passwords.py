"""Adaptive salted password hashes."""

import bcrypt

MAX_PASSWORD_BYTES = 72
"""bcrypt only considers the first 72 bytes of input."""


def hash_password(password: str, rounds: int = 12) -> str:
    """
    Generate a bcrypt hash of a password.

    Raises
    ------
    ValueError
        Raised if the password is empty or longer than bcrypt can hash.

    """
    encoded = password.encode('utf-8')
    if not encoded:
        raise ValueError('Password must not be empty')
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise ValueError(f'Password exceeds {MAX_PASSWORD_BYTES} bytes')
    return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds)).decode('ascii')


def check_password(password: str, hashed: str) -> bool:
    """Check a password against a bcrypt hash."""
    encoded = password.encode('utf-8')
    # Nothing this long is ever hashed, so it cannot match.
    if not encoded or len(encoded) > MAX_PASSWORD_BYTES:
        return False
    return bcrypt.checkpw(encoded, hashed.encode('ascii'))
