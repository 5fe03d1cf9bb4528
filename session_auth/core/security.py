import re
import secrets
from datetime import datetime, timedelta, timezone

from passlib.context import CryptContext

from session_auth.core.config import settings

# 32 random bytes, hex encoded
RESET_TOKEN_BYTES = 32
RESET_TOKEN_LENGTH = RESET_TOKEN_BYTES * 2
_RESET_TOKEN_RE = re.compile(rf"[0-9a-f]{{{RESET_TOKEN_LENGTH}}}")

# Password hashing context
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a hashed password.

    Raises ValueError when the hash is not a readable bcrypt hash; callers
    should check is_password_hash_well_formed first.
    """
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def is_password_hashable(password: str) -> bool:
    """bcrypt rejects NUL bytes in the plaintext."""
    return "\x00" not in password


def is_password_hash_well_formed(hashed_password: str | None) -> bool:
    """Return True if the stored hash is something the context can verify against."""
    if not hashed_password or not isinstance(hashed_password, str):
        return False
    return pwd_context.identify(hashed_password, required=False) is not None


def issue_reset_token(now: datetime | None = None) -> tuple[str, datetime]:
    """
    Create a password reset token and its absolute expiry.

    Returns: (token, expires_at) where token is 64 lowercase hex characters.
    """
    issued_at = now or datetime.now(timezone.utc)
    token = secrets.token_hex(RESET_TOKEN_BYTES)
    expires_at = issued_at + timedelta(minutes=settings.password_reset_token_expire_minutes)
    return token, expires_at


def is_reset_token_well_formed(token: str | None) -> bool:
    """Cheap shape check so malformed tokens never reach the database."""
    if not isinstance(token, str) or len(token) != RESET_TOKEN_LENGTH:
        return False
    return _RESET_TOKEN_RE.fullmatch(token) is not None


def mask_token(token: str) -> str:
    """Shorten a secret for log output."""
    return f"{token[:8]}..."
