"""Authentication routes (current user, login, password recovery)."""

import logging
import os

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import PlainTextResponse

from api.dependencies import get_notifier, get_user_repo
from api.models import (
    LoginRequest,
    MessageResponse,
    RecoverRequest,
    ResetPasswordRequest,
    TokenResponse,
    UserResponse,
)
from api.security import create_access_token, get_current_user_required
from domain.model.errors import (
    DeliveryError,
    InvalidCredentialsError,
    InvalidOrExpiredTokenError,
    NotVerifiedError,
    PersistenceError,
    SigningError,
    UnknownAccountError,
    ValidationError,
)
from port.notifier import Notifier
from port.user_repository import UserRepository
from services import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

SERVER_ERROR = "Server Error"


def public_base_url(request: Request) -> str:
    """Base URL used in emailed links. PUBLIC_BASE_URL wins over the request host."""
    return os.getenv("PUBLIC_BASE_URL") or str(request.base_url)


def server_error(e: Exception, action: str) -> HTTPException:
    logger.error(f"{action} failed", extra={"error_type": type(e).__name__, "error": str(e)})
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=SERVER_ERROR)


@router.get("", response_model=UserResponse)
async def get_logged_in_user(current_user: UserResponse = Depends(get_current_user_required)):
    """Return the user behind the session token (never the password hash)."""
    return current_user


@router.post("", response_model=TokenResponse)
async def login(request: LoginRequest, repo: UserRepository = Depends(get_user_repo)):
    """Authenticate and return a signed session token.

    Raises:
        HTTPException: 400 for invalid credentials or unverified account, 500 on store/signing failure
    """
    try:
        user = auth_service.authenticate(repo, request.email, request.password)
        token = create_access_token(user.id)
    except InvalidCredentialsError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except NotVerifiedError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"type": "not-verified", "msg": str(e)},
        )
    except (PersistenceError, SigningError) as e:
        raise server_error(e, "Login")

    logger.info("User logged in", extra={"userId": user.id})
    return TokenResponse(token=token)


@router.post("/recover", response_class=PlainTextResponse)
async def recover(
    body: RecoverRequest,
    request: Request,
    repo: UserRepository = Depends(get_user_repo),
    notifier: Notifier = Depends(get_notifier),
):
    """Generate a reset token and email the reset link.

    Raises:
        HTTPException: 401 if the email is unknown, 500 on store or delivery failure
    """
    try:
        user = auth_service.request_password_reset(
            repo, notifier, body.email, public_base_url(request),
        )
    except UnknownAccountError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    except (PersistenceError, DeliveryError) as e:
        raise server_error(e, "Password recovery")

    return PlainTextResponse(f"A verification email has been sent to {user.email}")


@router.get("/reset/{token}", response_model=MessageResponse)
async def check_reset(token: str, repo: UserRepository = Depends(get_user_repo)):
    """Check that a reset token exists and has not expired. Changes nothing.

    Raises:
        HTTPException: 401 if the token is invalid or expired
    """
    try:
        auth_service.check_reset_token(repo, token)
    except InvalidOrExpiredTokenError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    except PersistenceError as e:
        raise server_error(e, "Reset token lookup")

    return MessageResponse(msg="Password reset token is valid")


@router.post("/reset/{token}", response_class=PlainTextResponse)
async def reset(
    token: str,
    body: ResetPasswordRequest,
    repo: UserRepository = Depends(get_user_repo),
    notifier: Notifier = Depends(get_notifier),
):
    """Commit a new password through a reset token and send the confirmation email.

    Raises:
        HTTPException: 400 on validation, 401 if the token is invalid/expired/used, 500 otherwise
    """
    try:
        auth_service.reset_password(repo, notifier, token, body.password)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except InvalidOrExpiredTokenError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    except (PersistenceError, DeliveryError) as e:
        raise server_error(e, "Password reset")

    return PlainTextResponse("Your password has been updated.")
