from dataclasses import dataclass
from datetime import datetime


@dataclass
class User:
    """Domain model representing a user."""
    id: str
    name: str
    email: str
    created_at: datetime
    updated_at: datetime
    last_login: datetime | None = None
    password_hash: str | None = None
    is_verified: bool = False
    verification_token: str | None = None
    reset_token: str | None = None
    reset_expiry: datetime | None = None

    def has_pending_reset(self) -> bool:
        return self.reset_token is not None and self.reset_expiry is not None

    def reset_token_matches(self, token: str, now: datetime) -> bool:
        """True if `token` is the pending reset token and it has not expired."""
        if not self.has_pending_reset():
            return False
        return self.reset_token == token and now < self.reset_expiry
