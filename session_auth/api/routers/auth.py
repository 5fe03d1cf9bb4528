from fastapi import APIRouter, BackgroundTasks, Depends, Response
from sqlalchemy.orm import Session

from session_auth.api.deps import get_db, get_session_store, get_user_session
from session_auth.core.config import settings
from session_auth.core.cookies import clear_session_cookie, set_session_cookie
from session_auth.core.sessions import SessionStore, UserSession
from session_auth.schemas.auth import (
    AuthCheckResponse,
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    LoginRequest,
    LogoutResponse,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
)
from session_auth.services import auth as auth_service
from session_auth.services.email import deliver_password_reset_token

router = APIRouter(tags=["auth"])

# Pre-/api paths kept for older clients
legacy_router = APIRouter(tags=["auth"])


def register(body: RegisterRequest, db: Session = Depends(get_db)) -> RegisterResponse:
    """Create an account. Does not log the user in."""
    user = auth_service.register(db, body.email, body.password)
    return RegisterResponse(message="User registered successfully", user_id=user.id)


def login(
    body: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_user_session),
    store: SessionStore = Depends(get_session_store),
) -> MessageResponse:
    """Check credentials and start a cookie-backed session."""
    auth_service.login(db, body.email, body.password, session)
    auth_service.start_session(session, store)
    set_session_cookie(response, session)
    return MessageResponse(message="Login successful.")


router.add_api_route("/register", register, methods=["POST"], response_model=RegisterResponse)
router.add_api_route("/login", login, methods=["POST"], response_model=MessageResponse)
legacy_router.add_api_route("/register", register, methods=["POST"], response_model=RegisterResponse)
legacy_router.add_api_route("/login", login, methods=["POST"], response_model=MessageResponse)


@router.post("/logout", response_model=LogoutResponse)
def logout(
    response: Response,
    session: UserSession = Depends(get_user_session),
    store: SessionStore = Depends(get_session_store),
):
    """Destroy the session. Safe to call without one."""
    auth_service.logout(session, store)
    clear_session_cookie(response)
    return LogoutResponse(success=True, message="Logged out successfully")


@router.post("/authcheck", response_model=AuthCheckResponse, response_model_exclude_none=True)
def authcheck(response: Response, session: UserSession = Depends(get_user_session)):
    """Report whether the caller is logged in. Refreshes the cookie of a live session."""
    status = auth_service.auth_check(session)
    if status.logged_in:
        set_session_cookie(response, session)
    return AuthCheckResponse(logged_in=status.logged_in, user_id=status.user_id)


@router.post("/forgot", response_model=ForgotPasswordResponse, response_model_exclude_none=True)
def forgot_password(
    body: ForgotPasswordRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    """Issue a reset token. Delivery happens after the response is sent."""
    token = auth_service.forgot_password(db, body.email)
    background_tasks.add_task(deliver_password_reset_token, body.email, token)

    if settings.expose_reset_token:
        return ForgotPasswordResponse(
            message="Password reset token generated.",
            reset_token=token,
        )
    return ForgotPasswordResponse(message="Password reset instructions have been sent.")


@router.post("/reset", response_model=MessageResponse)
def reset_password(body: ResetPasswordRequest, db: Session = Depends(get_db)):
    """Set a new password with a reset token."""
    auth_service.reset_password(db, body.token, body.password)
    return MessageResponse(message="Password has been reset successfully.")
