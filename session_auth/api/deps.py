from collections.abc import Generator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from session_auth.core.cookies import get_session_id_from_cookie
from session_auth.core.sessions import SessionStore, SessionStoreError, UserSession
from session_auth.errors import SessionStoreFailureError


def get_db(request: Request) -> Generator[Session, None, None]:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_user_session(
    request: Request,
    store: SessionStore = Depends(get_session_store),
) -> UserSession:
    """
    Load the caller's session from the session cookie.

    A missing, unknown or expired cookie yields an empty, unsaved session.
    """
    session_id = get_session_id_from_cookie(request)
    try:
        session = store.get(session_id)
    except SessionStoreError as e:
        raise SessionStoreFailureError("Could not load session") from e
    return session or UserSession()
