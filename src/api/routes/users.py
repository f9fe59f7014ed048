"""User registration and email verification routes."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import PlainTextResponse

from api.dependencies import get_notifier, get_user_repo
from api.models import RegisterRequest, ResendVerificationRequest, UserResponse
from api.routes.auth import public_base_url, server_error
from api.security import to_response
from domain.model.errors import (
    DeliveryError,
    DuplicateError,
    InvalidOrExpiredTokenError,
    PersistenceError,
    UnknownAccountError,
    ValidationError,
)
from port.notifier import Notifier
from port.user_repository import UserRepository
from services import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    request: Request,
    repo: UserRepository = Depends(get_user_repo),
    notifier: Notifier = Depends(get_notifier),
):
    """Register a new account and email a verification link.

    Raises:
        HTTPException: 409 if the email is taken, 400 on validation, 500 on store or delivery failure
    """
    try:
        user = auth_service.register(
            repo, notifier, body.email, body.password, body.name, public_base_url(request),
        )
    except DuplicateError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except (PersistenceError, DeliveryError) as e:
        raise server_error(e, "Registration")

    logger.info("User registered", extra={"userId": user.id})
    return to_response(user)


@router.get("/verify/{token}", response_class=PlainTextResponse)
async def verify(token: str, repo: UserRepository = Depends(get_user_repo)):
    """Confirm the email address behind a verification token."""
    try:
        user = auth_service.verify_email(repo, token)
    except InvalidOrExpiredTokenError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    except PersistenceError as e:
        raise server_error(e, "Email verification")

    return PlainTextResponse(f"The account {user.email} has been verified. Please log in.")


@router.post("/verify", response_class=PlainTextResponse)
async def resend_verification(
    body: ResendVerificationRequest,
    request: Request,
    repo: UserRepository = Depends(get_user_repo),
    notifier: Notifier = Depends(get_notifier),
):
    """Send the verification link again, e.g. after the first email bounced.

    Raises:
        HTTPException: 401 if the email is unknown, 400 if already verified, 500 on store or delivery failure
    """
    try:
        user = auth_service.resend_verification(repo, notifier, body.email, public_base_url(request))
    except UnknownAccountError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except (PersistenceError, DeliveryError) as e:
        raise server_error(e, "Verification resend")

    return PlainTextResponse(f"A verification email has been sent to {user.email}")
