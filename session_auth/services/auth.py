"""Auth service: registration, login/logout, auth check, reset token issuance and password reset."""

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from session_auth.core.config import settings
from session_auth.core.security import (
    get_password_hash,
    is_password_hash_well_formed,
    is_password_hashable,
    is_reset_token_well_formed,
    issue_reset_token,
    mask_token,
    verify_password,
)
from session_auth.core.sessions import SessionStore, SessionStoreError, UserSession
from session_auth.db.models.user import User as UserModel
from session_auth.errors import (
    CorruptCredentialError,
    DomainValidationError,
    DuplicateEmailError,
    InvalidOrExpiredTokenError,
    InvalidPasswordError,
    SessionStoreFailureError,
    UnknownEmailError,
    UpdateFailedError,
)
from session_auth.repositories.user import (
    create_user,
    get_user_by_email,
    get_user_by_valid_reset_token,
    set_password_reset_token,
    update_password_and_clear_reset,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthStatus:
    logged_in: bool
    user_id: int | None = None


def register(db: Session, email: str, password: str) -> UserModel:
    """
    Register a new user.

    Raises:
        DomainValidationError: If email or password is empty, or the password is unusable.
        DuplicateEmailError: If the email is already registered.
    """
    if not email or not email.strip():
        raise DomainValidationError("Email is required")
    if not password:
        raise DomainValidationError("Password is required")
    if len(password) < settings.registration_min_password_length:
        raise DomainValidationError(
            f"Password must be at least {settings.registration_min_password_length} characters long"
        )
    if not is_password_hashable(password):
        raise DomainValidationError("Password must not contain NUL characters")

    if get_user_by_email(db, email):
        raise DuplicateEmailError("Email already in use")

    user = create_user(db, email=email, password_hash=get_password_hash(password))
    logger.info("Registered user %s", user.id)
    return user


def login(db: Session, email: str, password: str, session: UserSession) -> UserModel:
    """
    Check credentials and bind the user to the session.

    The session is only touched once the password has been verified.

    Raises:
        UnknownEmailError: If no user has this email.
        CorruptCredentialError: If the stored hash is missing or unreadable.
        InvalidPasswordError: If the password does not match.
    """
    user = get_user_by_email(db, email)
    if not user:
        raise UnknownEmailError("Email does not exist.")

    if not is_password_hash_well_formed(user.password_hash):
        logger.error("User %s has an unreadable password hash", user.id)
        raise CorruptCredentialError("Password error.")

    # No stored hash was built from a password containing NUL
    if not is_password_hashable(password):
        logger.warning("Failed login for user %s", user.id)
        raise InvalidPasswordError("Incorrect password.")

    try:
        valid = verify_password(password, user.password_hash)
    except ValueError as e:
        logger.error("Password hash for user %s failed to parse: %s", user.id, e)
        raise CorruptCredentialError("Password error.") from e

    if not valid:
        logger.warning("Failed login for user %s", user.id)
        raise InvalidPasswordError("Incorrect password.")

    session.user_id = user.id
    logger.info("User %s logged in", user.id)
    return user


def start_session(session: UserSession, store: SessionStore) -> UserSession:
    """Persist a freshly authenticated session under a new id."""
    try:
        return store.regenerate(session)
    except SessionStoreError as e:
        raise SessionStoreFailureError("Could not save session") from e


def logout(session: UserSession, store: SessionStore) -> bool:
    """
    Destroy the session. Idempotent: logging out without a session is not an error.

    Returns: True if a stored session was removed.

    Raises:
        SessionStoreFailureError: If the session store fails.
    """
    user_id = session.user_id
    try:
        destroyed = store.destroy(session.session_id)
    except SessionStoreError as e:
        raise SessionStoreFailureError("Could not destroy session") from e

    session.session_id = None
    session.user_id = None
    session.expires_at = None
    if destroyed:
        logger.info("User %s logged out", user_id)
    return destroyed


def auth_check(session: UserSession) -> AuthStatus:
    """Report whether the session is bound to a user."""
    if session.is_authenticated:
        return AuthStatus(logged_in=True, user_id=session.user_id)
    return AuthStatus(logged_in=False)


def forgot_password(db: Session, email: str, now: datetime | None = None) -> str:
    """
    Issue a password reset token for the user and store it with its expiry.

    Delivery is up to the caller; the token is returned as-is.

    Raises:
        UnknownEmailError: If no user has this email.
    """
    user = get_user_by_email(db, email)
    if not user:
        raise UnknownEmailError("Email does not exist.")

    token, expires = issue_reset_token(now)
    if not set_password_reset_token(db, user.email, token, expires):
        raise UnknownEmailError("Email does not exist.")

    logger.info("Issued reset token %s for user %s", mask_token(token), user.id)
    return token


def reset_password(
    db: Session, token: str, new_password: str, now: datetime | None = None
) -> None:
    """
    Set a new password using a reset token, consuming the token.

    Raises:
        InvalidOrExpiredTokenError: If the token is malformed, unknown or expired.
        DomainValidationError: If the new password is too short or contains NUL.
        UpdateFailedError: If the token was consumed by a concurrent reset.
    """
    if not is_reset_token_well_formed(token):
        logger.warning("Rejected malformed reset token")
        raise InvalidOrExpiredTokenError("Invalid or expired token.")

    user = get_user_by_valid_reset_token(db, token, now=now)
    if not user:
        logger.warning("Rejected reset token %s", mask_token(token))
        raise InvalidOrExpiredTokenError("Invalid or expired token.")

    if not new_password or len(new_password) < settings.reset_password_min_length:
        raise DomainValidationError(
            f"Password must be at least {settings.reset_password_min_length} characters long."
        )
    if not is_password_hashable(new_password):
        raise DomainValidationError("Password must not contain NUL characters")

    password_hash = get_password_hash(new_password)
    if not update_password_and_clear_reset(db, user.id, password_hash, token):
        raise UpdateFailedError("Password could not be updated. Please request a new reset link.")

    logger.info("Password reset completed for user %s", user.id)
