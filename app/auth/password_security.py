from typing import Optional

from passlib.context import CryptContext

# ---------------------------
# Password hashing context
# ---------------------------
# Account, class and quiz passwords all go through the same context.
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(password: str) -> str:
    """
    Returns a securely hashed password using Argon2.
    """
    return pwd_context.hash(password)


def hash_optional_password(password: Optional[str]) -> Optional[str]:
    """Quiz passwords are optional: an empty or missing value means no password."""
    return hash_password(password) if password else None


def verify_password(plain_password: Optional[str], hashed_password: Optional[str]) -> bool:
    """
    Verifies a plain password against the hashed password.
    A missing password or a missing hash never matches.
    """
    if not plain_password or not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def password_needs_rehash(hashed_password: str) -> bool:
    """True when the stored hash uses outdated parameters and should be replaced."""
    return pwd_context.needs_update(hashed_password)
