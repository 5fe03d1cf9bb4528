from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on read)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True, slots=True)
class ResetTokenPolicy:
    """Defines when a stored password reset token is usable "as of" a given instant.

    Semantics (intentionally centralized):
    - A token is valid if it is present AND expires_at > as_of
    - A token whose expires_at has passed is treated as absent, even if the
      raw value is still stored.

    Note: expiry is exclusive. A token expiring exactly at as_of is expired.
    """

    as_of: datetime

    @classmethod
    def now(cls) -> ResetTokenPolicy:
        return cls(as_of=datetime.now(timezone.utc))

    def is_expired(self, expires_at: datetime | None) -> bool:
        if expires_at is None:
            return True
        return as_utc(expires_at) <= as_utc(self.as_of)

    def is_valid(self, *, token: str | None, expires_at: datetime | None) -> bool:
        return token is not None and not self.is_expired(expires_at)

    def sqlalchemy_expired_predicate(self, *, expires_col):
        """Build a SQLAlchemy predicate implementing the expired rule.

        Kept here so repositories can translate the policy into SQL without
        redefining the boundary conditions.
        """
        from sqlalchemy import or_

        return or_(expires_col.is_(None), expires_col <= self.as_of)
