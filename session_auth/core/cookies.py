"""Session cookie helpers."""
from fastapi import Request, Response

from session_auth.core.config import settings
from session_auth.core.sessions import UserSession


def get_session_id_from_cookie(request: Request) -> str | None:
    return request.cookies.get(settings.session_cookie_name)


def set_session_cookie(response: Response, session: UserSession) -> None:
    """Set the session cookie: HttpOnly, same-site scoped, lifetime of the session."""
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session.session_id,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite=settings.session_cookie_samesite,
        max_age=settings.session_max_age_minutes * 60,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.session_cookie_name,
        path="/",
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite=settings.session_cookie_samesite,
    )
