"""Password hashing utilities."""

from typing import Optional

from passlib.context import CryptContext

# bcrypt_sha256 pre-hashes with SHA-256, so passwords over 72 bytes are not truncated
pwd_context = CryptContext(schemes=["bcrypt_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify a password against its hash. Accounts without a hash never match."""
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def needs_update(hashed_password: str) -> bool:
    """Check if password hash needs updating."""
    return pwd_context.needs_update(hashed_password)
