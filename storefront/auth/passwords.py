"""Password hashing with bcrypt.

Hashes carry their own salt and cost factor ($2b$10$...), so verify
needs nothing but the stored string.
"""

import bcrypt

from storefront.errors import ValidationFailed

DEFAULT_ROUNDS = 10

# bcrypt only looks at the first 72 bytes of input
MAX_PASSWORD_BYTES = 72


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """
    Hash a plaintext password.

    Raises:
        ValidationFailed: password is empty or longer than bcrypt accepts
    """
    encoded = password.encode("utf-8")
    if not encoded:
        raise ValidationFailed("Password cannot be empty")
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise ValidationFailed(f"Password cannot exceed {MAX_PASSWORD_BYTES} bytes")

    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(encoded, salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash."""
    try:
        return bcrypt.checkpw(
            password.encode("utf-8"),
            password_hash.encode("utf-8"),
        )
    except (ValueError, TypeError):
        # Malformed hash or over-long input
        return False
