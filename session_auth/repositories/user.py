import functools
import logging
from datetime import datetime

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from session_auth.db.models.user import User as UserModel
from session_auth.domain.reset_token import ResetTokenPolicy
from session_auth.errors import DomainError, DuplicateEmailError, StoreUnavailableError

logger = logging.getLogger(__name__)


def _translate_store_errors(func):
    """Roll back and surface driver/query failures as StoreUnavailableError."""

    @functools.wraps(func)
    def wrapper(db: Session, *args, **kwargs):
        try:
            return func(db, *args, **kwargs)
        except DomainError:
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("Credential store failure in %s", func.__name__)
            raise StoreUnavailableError("Credential store unavailable") from e

    return wrapper


@_translate_store_errors
def get_user_by_email(db: Session, email: str) -> UserModel | None:
    """Get a user by email."""
    return db.query(UserModel).filter(UserModel.email == email).first()


@_translate_store_errors
def create_user(db: Session, email: str, password_hash: str) -> UserModel:
    """
    Insert a new user. Pure data access - no business logic.

    The unique index on email is the authoritative duplicate check. Other
    constraint violations are store faults.

    Raises:
        DuplicateEmailError: If another row already holds this email.
        StoreUnavailableError: On any other failure.
    """
    db_user = UserModel(email=email, password_hash=password_hash)
    db.add(db_user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if db.query(UserModel.id).filter(UserModel.email == email).first() is None:
            raise
        raise DuplicateEmailError("Email already in use") from e
    db.refresh(db_user)
    return db_user


@_translate_store_errors
def get_user_by_valid_reset_token(
    db: Session, token: str, now: datetime | None = None
) -> UserModel | None:
    """
    Get the user holding this reset token, if the token has not expired.

    An expired token found here is cleared on the spot and reported as absent.
    """
    policy = ResetTokenPolicy(as_of=now) if now else ResetTokenPolicy.now()
    user = db.query(UserModel).filter(UserModel.reset_token == token).first()
    if not user:
        return None

    if policy.is_valid(token=user.reset_token, expires_at=user.reset_expires):
        return user

    _clear_expired_reset_token(db, user.id, token, policy)
    return None


def _clear_expired_reset_token(
    db: Session, user_id: int, token: str, policy: ResetTokenPolicy
) -> None:
    stmt = (
        update(UserModel)
        .where(
            UserModel.id == user_id,
            UserModel.reset_token == token,
            policy.sqlalchemy_expired_predicate(expires_col=UserModel.reset_expires),
        )
        .values(reset_token=None, reset_expires=None)
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    db.commit()
    if result.rowcount:
        logger.info("Cleared expired reset token for user %s", user_id)


@_translate_store_errors
def update_password_and_clear_reset(
    db: Session, user_id: int, password_hash: str, token: str
) -> bool:
    """
    Replace the password hash and clear both reset fields in one statement.

    The write is guarded on the token still being present, so when two
    requests consume the same token only one of them affects a row.

    Returns: True if exactly one row was updated.
    """
    stmt = (
        update(UserModel)
        .where(UserModel.id == user_id, UserModel.reset_token == token)
        .values(password_hash=password_hash, reset_token=None, reset_expires=None)
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    db.commit()
    return result.rowcount == 1


@_translate_store_errors
def set_password_reset_token(db: Session, email: str, token: str, expires: datetime) -> bool:
    """
    Set token and expiry together for the user with this email.

    Returns: False if no user matched.
    """
    stmt = (
        update(UserModel)
        .where(UserModel.email == email)
        .values(reset_token=token, reset_expires=expires)
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    db.commit()
    return result.rowcount == 1
