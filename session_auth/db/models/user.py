from sqlalchemy import Column, DateTime, Integer, String, func

from session_auth.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(320), unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    # Both set by forgot-password, both cleared by reset or expiry
    reset_token = Column(String(64), nullable=True, index=True)
    reset_expires = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
