"""Auth service: registration, login and password recovery business logic.

Pure business logic with no HTTP dependencies.
Raises domain errors that route handlers map to HTTP status codes.

Password reset lifecycle of a user record:

    NoReset --request_password_reset--> PendingReset --reset_password--> NoReset

check_reset_token only reads. reset_password commits through the repository's
atomic consume, so a token is accepted at most once.
"""

import logging
import os
import secrets
from datetime import datetime, timedelta, timezone

import bcrypt

from domain.model.errors import (
    DeliveryError,
    DuplicateError,
    InvalidCredentialsError,
    InvalidOrExpiredTokenError,
    NotVerifiedError,
    UnknownAccountError,
    ValidationError,
)
from domain.model.user import User
from port.notifier import Notifier
from port.user_repository import UserRepository
from services import email_templates

logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = 12
MIN_PASSWORD_LENGTH = 6
# bcrypt only hashes the first 72 bytes and rejects longer input
MAX_PASSWORD_BYTES = 72
RESET_TOKEN_TTL = timedelta(seconds=int(os.getenv("RESET_TOKEN_TTL_SECONDS", "3600")))

INVALID_CREDENTIALS_MESSAGE = "Invalid Credentials"
NOT_VERIFIED_MESSAGE = "Your account has not been verified."
INVALID_RESET_TOKEN_MESSAGE = "Password reset token is invalid or has expired"
INVALID_VERIFICATION_TOKEN_MESSAGE = "Verification token is invalid or has already been used"

_dummy_hash = None


def _hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def _too_long(password: str) -> bool:
    return len(password.encode("utf-8")) > MAX_PASSWORD_BYTES


def _verify_password(plain: str, hashed: str) -> bool:
    if _too_long(plain):
        return False
    return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))


def _burn_hash_check(plain: str) -> None:
    """Run one bcrypt comparison against a throwaway hash.

    Keeps a login for an unknown email as slow as one with a wrong password.
    """
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = _hash_password(secrets.token_hex(16))
    _verify_password(plain, _dummy_hash)


def _validate_password(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} chars long", field="password",
        )
    if _too_long(password):
        raise ValidationError(
            f"Password must be at most {MAX_PASSWORD_BYTES} bytes long", field="password",
        )


def _new_token() -> str:
    return secrets.token_hex(20)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _send(notifier: Notifier, message, user_id: str) -> None:
    """Send and log a delivery failure before re-raising it.

    The state change that preceded the send is kept either way.
    """
    try:
        notifier.send(message)
    except DeliveryError as e:
        logger.error(
            "Email delivery failed",
            extra={"userId": user_id, "subject": message.subject, "error": str(e)},
        )
        raise


# ── registration ─────────────────────────────────────────


def register(
    repo: UserRepository,
    notifier: Notifier,
    email: str,
    password: str,
    name: str,
    base_url: str,
) -> User:
    """Register a new, unverified user and email them a verification link.

    Raises:
        ValidationError: password too short
        DuplicateError: email already registered
        DeliveryError: verification email could not be sent (user stays created)
    """
    _validate_password(password)
    if repo.get_by_email(email):
        raise DuplicateError("User already exists")

    token = _new_token()
    user = repo.create(
        email=email,
        password_hash=_hash_password(password),
        name=name,
        verification_token=token,
    )
    if not user:
        raise DuplicateError("User already exists")

    verify_url = f"{base_url.rstrip('/')}/api/users/verify/{token}"
    _send(notifier, email_templates.verification_email(user.email, verify_url), user.id)
    return user


def verify_email(repo: UserRepository, token: str) -> User:
    """Mark the account holding `token` as verified.

    Raises:
        InvalidOrExpiredTokenError: no account holds this token
    """
    user = repo.consume_verification_token(token)
    if not user:
        raise InvalidOrExpiredTokenError(INVALID_VERIFICATION_TOKEN_MESSAGE)
    return user


def resend_verification(
    repo: UserRepository,
    notifier: Notifier,
    email: str,
    base_url: str,
) -> User:
    """Mail the pending verification link again.

    Raises:
        UnknownAccountError: no account for this email
        ValidationError: the account is already verified
        DeliveryError: the email failed again
    """
    user = repo.get_by_email(email)
    if not user:
        raise UnknownAccountError(f"The email address {email} is not associated with any account.")
    if user.is_verified or not user.verification_token:
        raise ValidationError("This account has already been verified.", field="email")

    verify_url = f"{base_url.rstrip('/')}/api/users/verify/{user.verification_token}"
    _send(notifier, email_templates.verification_email(user.email, verify_url), user.id)
    return user


# ── login ────────────────────────────────────────────────


def authenticate(repo: UserRepository, email: str, password: str) -> User:
    """Authenticate a user by email and password.

    Returns the authenticated User domain object.
    Doesn't reveal whether the email exists.

    Raises:
        InvalidCredentialsError: unknown email or wrong password
        NotVerifiedError: credentials are right but the account is unverified
    """
    user = repo.get_by_email(email)
    if not user or not user.password_hash:
        _burn_hash_check(password)
        raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE)
    if not _verify_password(password, user.password_hash):
        raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE)

    if not user.is_verified:
        raise NotVerifiedError(NOT_VERIFIED_MESSAGE)

    # login succeeds even if the timestamp update fails
    repo.update_last_login(user.id)
    return user


# ── password recovery ────────────────────────────────────


def request_password_reset(
    repo: UserRepository,
    notifier: Notifier,
    email: str,
    base_url: str,
    now: datetime | None = None,
) -> User:
    """Issue a fresh reset token for `email` and mail the reset link.

    Any earlier pending token is replaced.

    Raises:
        UnknownAccountError: no account for this email (nothing stored, nothing sent)
        DeliveryError: the email failed; the token stays stored
    """
    user = repo.get_by_email(email)
    if not user:
        raise UnknownAccountError(
            f"The email address {email} is not associated with any account. "
            "Double-check your email address and try again"
        )

    token = _new_token()
    expiry = (now or _now()) + RESET_TOKEN_TTL
    if not repo.set_reset_token(user.id, token, expiry):
        raise UnknownAccountError(f"The email address {email} is not associated with any account.")

    user.reset_token = token
    user.reset_expiry = expiry
    logger.info("Password reset requested", extra={"userId": user.id})

    reset_url = f"{base_url.rstrip('/')}/api/auth/reset/{token}"
    _send(notifier, email_templates.password_reset_email(user.email, reset_url), user.id)
    return user


def check_reset_token(repo: UserRepository, token: str, now: datetime | None = None) -> User:
    """Return the user holding a pending, unexpired reset token.

    Raises:
        InvalidOrExpiredTokenError: token unknown, already used, or expired
    """
    user = repo.get_by_reset_token(token, now or _now())
    if not user:
        raise InvalidOrExpiredTokenError(INVALID_RESET_TOKEN_MESSAGE)
    return user


def reset_password(
    repo: UserRepository,
    notifier: Notifier,
    token: str,
    password: str,
    now: datetime | None = None,
) -> User:
    """Set a new password through a reset token and send the confirmation email.

    Raises:
        ValidationError: password too short (checked before touching the store)
        InvalidOrExpiredTokenError: token unknown, already used, or expired
        DeliveryError: confirmation email failed; the new password stays in place
    """
    _validate_password(password)

    user = repo.consume_reset_token(token, now or _now(), _hash_password(password))
    if not user:
        raise InvalidOrExpiredTokenError(INVALID_RESET_TOKEN_MESSAGE)

    logger.info("Password updated via reset token", extra={"userId": user.id})
    _send(notifier, email_templates.password_changed_email(user.email, user.name), user.id)
    return user
