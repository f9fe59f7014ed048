"""In-memory implementation of UserRepository for testing."""

import threading
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from domain.model.user import User


class FakeUserRepository:
    def __init__(self):
        self.store: dict[str, User] = {}
        self._lock = threading.Lock()

    # ── write operations ─────────────────────────────────────

    def create(
        self,
        email: str,
        password_hash: str,
        name: str,
        verification_token: str | None = None,
    ) -> User | None:
        with self._lock:
            if any(u.email == email for u in self.store.values()):
                return None

            user_id = uuid.uuid4().hex
            now = datetime.now(timezone.utc)

            user = User(
                id=user_id,
                name=name,
                email=email,
                created_at=now,
                updated_at=now,
                password_hash=password_hash,
                verification_token=verification_token,
            )
            self.store[user_id] = user
            return replace(user)

    def update_last_login(self, user_id: str) -> bool:
        with self._lock:
            user = self.store.get(user_id)
            if not user:
                return False

            now = datetime.now(timezone.utc)
            user.last_login = now
            user.updated_at = now
            return True

    def set_reset_token(self, user_id: str, token: str, expiry: datetime) -> bool:
        with self._lock:
            user = self.store.get(user_id)
            if not user:
                return False

            user.reset_token = token
            user.reset_expiry = expiry
            user.updated_at = datetime.now(timezone.utc)
            return True

    def consume_reset_token(self, token: str, now: datetime, password_hash: str) -> User | None:
        with self._lock:
            user = self._find_by_reset_token(token, now)
            if not user:
                return None

            user.password_hash = password_hash
            user.reset_token = None
            user.reset_expiry = None
            user.updated_at = now
            return replace(user)

    def consume_verification_token(self, token: str) -> User | None:
        with self._lock:
            for user in self.store.values():
                if user.verification_token is not None and user.verification_token == token:
                    user.is_verified = True
                    user.verification_token = None
                    user.updated_at = datetime.now(timezone.utc)
                    return replace(user)
            return None

    # ── read operations ──────────────────────────────────────

    def get_by_email(self, email: str) -> User | None:
        for user in self.store.values():
            if user.email == email:
                return replace(user)
        return None

    def get_by_id(self, user_id: str) -> User | None:
        user = self.store.get(user_id)
        return replace(user) if user else None

    def get_by_reset_token(self, token: str, now: datetime) -> User | None:
        user = self._find_by_reset_token(token, now)
        return replace(user) if user else None

    def _find_by_reset_token(self, token: str, now: datetime) -> User | None:
        for user in self.store.values():
            if user.reset_token_matches(token, now):
                return user
        return None
