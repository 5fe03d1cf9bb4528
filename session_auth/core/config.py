from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = Field(alias="DATABASE_URL")

    # Password hashing (bcrypt cost factor)
    bcrypt_rounds: int = Field(default=12, ge=10, le=15, alias="BCRYPT_ROUNDS")

    # Password policy
    registration_min_password_length: int = Field(
        default=1, ge=1, alias="REGISTRATION_MIN_PASSWORD_LENGTH"
    )
    reset_password_min_length: int = Field(default=8, ge=1, alias="RESET_PASSWORD_MIN_LENGTH")

    # Password Reset
    password_reset_token_expire_minutes: int = Field(
        default=60, alias="PASSWORD_RESET_TOKEN_EXPIRE_MINUTES"
    )
    # Prototype mode: return the reset token in the forgot-password response
    expose_reset_token: bool = Field(default=True, alias="EXPOSE_RESET_TOKEN")

    # Sessions
    session_cookie_name: str = Field(default="sid", alias="SESSION_COOKIE_NAME")
    session_max_age_minutes: int = Field(default=120, ge=1, alias="SESSION_MAX_AGE_MINUTES")
    session_cookie_secure: bool = Field(default=False, alias="SESSION_COOKIE_SECURE")
    session_cookie_samesite: Literal["strict", "lax", "none"] = Field(
        default="strict", alias="SESSION_COOKIE_SAMESITE"
    )
    session_purge_interval_seconds: float = Field(
        default=300, gt=0, alias="SESSION_PURGE_INTERVAL_SECONDS"
    )

    # SMTP Configuration (optional)
    smtp_host: str | None = Field(default=None, alias="SMTP_HOST")
    smtp_port: int | None = Field(default=None, alias="SMTP_PORT")
    smtp_user: str | None = Field(default=None, alias="SMTP_USER")
    smtp_password: str | None = Field(default=None, alias="SMTP_PASSWORD")
    smtp_use_tls: bool = Field(default=True, alias="SMTP_USE_TLS")
    smtp_from_email: str | None = Field(default=None, alias="SMTP_FROM_EMAIL")

    # Frontend URL for CORS and password reset links
    frontend_url: str | None = Field(default=None, alias="FRONTEND_URL")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @field_validator("smtp_host", "smtp_user", "smtp_password", "smtp_from_email", mode="before")
    @classmethod
    def empty_str_to_none(cls, v: str | None) -> str | None:
        """Convert empty strings to None for optional string fields."""
        if v == "":
            return None
        return v

    @field_validator("smtp_port", mode="before")
    @classmethod
    def empty_str_to_none_int(cls, v: str | int | None) -> int | None:
        """Convert empty strings to None for optional integer fields."""
        if v == "":
            return None
        if isinstance(v, str):
            try:
                return int(v)
            except ValueError:
                return None
        return v

    @field_validator("session_cookie_samesite", mode="before")
    @classmethod
    def lower_samesite(cls, v: str) -> str:
        return v.lower() if isinstance(v, str) else v

    @property
    def smtp_configured(self) -> bool:
        return all(
            [
                self.smtp_host,
                self.smtp_port,
                self.smtp_user,
                self.smtp_password,
                self.smtp_from_email,
            ]
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
