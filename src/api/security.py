"""JWT session tokens and authentication dependencies."""

import os
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader, HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from jose.exceptions import JOSEError

from api.dependencies import get_user_repo
from api.models import UserResponse
from domain.model.errors import PersistenceError, SigningError
from domain.model.user import User
from port.user_repository import UserRepository

logger = logging.getLogger(__name__)

# JWT Configuration
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY")
if not JWT_SECRET_KEY:
    raise ValueError(
        "JWT_SECRET_KEY environment variable is required. "
        "Generate a secure key with: openssl rand -hex 32"
    )
JWT_ALGORITHM = "HS256"
JWT_EXPIRATION_SECONDS = 360000

bearer = HTTPBearer(auto_error=False)
auth_header = APIKeyHeader(name="x-auth-token", auto_error=False)


def to_response(user: User) -> UserResponse:
    """Convert domain User to API UserResponse."""
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        is_verified=user.is_verified,
        created_at=user.created_at,
        updated_at=user.updated_at,
        last_login=user.last_login,
    )


def create_access_token(user_id: str) -> str:
    """Create a signed session token carrying {"user": {"id": user_id}}.

    Raises:
        SigningError: the token could not be signed
    """
    now = datetime.now(timezone.utc)
    payload = {
        "user": {"id": user_id},
        "exp": now + timedelta(seconds=JWT_EXPIRATION_SECONDS),
        "iat": now,
    }
    try:
        return jwt.encode(payload, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)
    except JOSEError as e:
        logger.error("JWT signing failed", extra={"userId": user_id, "error": str(e)})
        raise SigningError("Failed to sign session token") from e


def verify_token(token: str) -> Optional[str]:
    """Verify JWT token and extract user_id."""
    try:
        payload = jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError as e:
        logger.debug(f"JWT verification failed: {e}")
        return None

    user = payload.get("user")
    if not isinstance(user, dict):
        return None
    return user.get("id")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user_required(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    header_token: Optional[str] = Depends(auth_header),
    user_repo: UserRepository = Depends(get_user_repo),
) -> UserResponse:
    """Get current authenticated user (required). Raises 401 if not authenticated.

    The token is read from `Authorization: Bearer` or from `x-auth-token`.
    """
    token = credentials.credentials if credentials else header_token
    if not token:
        raise _unauthorized("No token, authorization denied")

    user_id = verify_token(token)
    if not user_id:
        raise _unauthorized("Token is not valid")

    try:
        user = user_repo.get_by_id(user_id)
    except PersistenceError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Server Error")

    if not user:
        raise _unauthorized("User not found")

    return to_response(user)
