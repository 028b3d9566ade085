"""Password hashing with bcrypt."""
import bcrypt

# bcrypt only looks at the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72


def hash_password(password: str, rounds: int = 10) -> str:
    """Hash a plaintext password into a salted bcrypt digest."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("ascii")


def verify_password(password: str, password_hash: str) -> bool:
    """
    Check a plaintext password against a stored bcrypt digest.

    A malformed digest is treated as a mismatch rather than an error.
    """
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("ascii"))
    except ValueError:
        return False
