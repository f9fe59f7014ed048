from datetime import datetime
from typing import Protocol
from domain.model.user import User


class UserRepository(Protocol):
    """Protocol defining the interface for user data access.

    Implementations raise PersistenceError when the backing store fails.
    """
    def create(
        self,
        email: str,
        password_hash: str,
        name: str,
        verification_token: str | None = None,
    ) -> User | None:
        """Create a new user. Return User or None if the email is taken."""
        ...

    def get_by_email(self, email: str) -> User | None:
        """Find a user by email. Return User or None if not found."""
        ...

    def get_by_id(self, user_id: str) -> User | None:
        """Find a user by ID. Return User or None if not found."""
        ...

    def update_last_login(self, user_id: str) -> bool:
        """Update the last login timestamp for a user. Return True if successful."""
        ...

    def set_reset_token(self, user_id: str, token: str, expiry: datetime) -> bool:
        """Store a pending reset token and its expiry together. Return True if the user exists."""
        ...

    def get_by_reset_token(self, token: str, now: datetime) -> User | None:
        """Find the user whose reset token equals `token` and expires after `now`."""
        ...

    def consume_reset_token(self, token: str, now: datetime, password_hash: str) -> User | None:
        """Atomically swap in `password_hash` and clear the reset token/expiry.

        Matches only a token that is still pending and not expired, so at most
        one caller can consume a given token. Return the updated User or None.
        """
        ...

    def consume_verification_token(self, token: str) -> User | None:
        """Atomically mark the matching user verified and clear the token."""
        ...
