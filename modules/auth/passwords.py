"""
Password hashing.

Uses passlib's PBKDF2-SHA256 scheme, which is pure Python and does not
depend on the external ``bcrypt`` wheel.
"""

from passlib.context import CryptContext

pwd_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
)


def generate_hash(password: str) -> str:
    """
    Hash a plain-text password with a fresh salt.
    """
    return pwd_context.hash(password)


def check_password(password: str, hashed: str) -> bool:
    """
    Verify a candidate password against a stored hash.

    Malformed or unknown hash formats count as a mismatch.
    """
    if not password or not hashed:
        return False
    try:
        return pwd_context.verify(password, hashed)
    except ValueError:
        return False


def dummy_verify() -> None:
    """Spend the same time as a real verification when there is no hash."""
    pwd_context.dummy_verify()
