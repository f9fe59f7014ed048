"""MongoDB implementation of UserRepository."""

import uuid
from datetime import datetime, timezone
from logging import getLogger
from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError
from adapter.mongodb import USERS_COLLECTION_NAME
from domain.model.errors import PersistenceError
from domain.model.user import User

logger = getLogger(__name__)


class MongoUserRepository:
    def __init__(self, db: Database):
        self.collection = db[USERS_COLLECTION_NAME]

    def ensure_indexes(self) -> bool:
        """Create indexes for users collection."""
        from adapter.mongodb.indexes import create_index_safe

        try:
            create_index_safe(self.collection, [('email', 1)], 'idx_users_email', unique=True)
            create_index_safe(self.collection, [('created_at', -1)], 'idx_users_created_at')
            create_index_safe(
                self.collection, [('reset_token', 1)], 'idx_users_reset_token', sparse=True,
            )
            create_index_safe(
                self.collection, [('verification_token', 1)], 'idx_users_verification_token', sparse=True,
            )
            return True
        except Exception as e:
            logger.error("Failed to create users indexes", extra={"error": str(e)})
            return False

    def _to_domain(self, doc: dict) -> User:
        """Convert MongoDB document to User domain model."""
        return User(
            id=doc['_id'],
            name=doc.get('name', ''),
            email=doc['email'],
            created_at=doc['created_at'],
            updated_at=doc['updated_at'],
            last_login=doc.get('last_login'),
            password_hash=doc.get('password_hash'),
            is_verified=doc.get('is_verified', False),
            verification_token=doc.get('verification_token'),
            reset_token=doc.get('reset_token'),
            reset_expiry=_as_utc(doc.get('reset_expiry')),
        )

    # ── write operations ─────────────────────────────────────

    def create(
        self,
        email: str,
        password_hash: str,
        name: str,
        verification_token: str | None = None,
    ) -> User | None:
        """Create a new user and return the User object, or None if the email is taken."""
        user_id = uuid.uuid4().hex
        now = datetime.now(timezone.utc)
        user_doc = {
            '_id': user_id,
            'email': email,
            'password_hash': password_hash,
            'name': name,
            'is_verified': False,
            'created_at': now,
            'updated_at': now,
        }
        if verification_token:
            user_doc['verification_token'] = verification_token

        try:
            self.collection.insert_one(user_doc)
        except DuplicateKeyError:
            logger.warning("User creation failed: email already exists", extra={"email": email})
            return None
        except PyMongoError as e:
            logger.error("Failed to create user", extra={"email": email, "error": str(e)})
            raise PersistenceError("Failed to create user") from e

        logger.info("User created", extra={"userId": user_id, "email": email})
        return self._to_domain(user_doc)

    def update_last_login(self, user_id: str) -> bool:
        """Update the last login timestamp for a user. Return True if successful."""
        try:
            now = datetime.now(timezone.utc)
            result = self.collection.update_one(
                {'_id': user_id},
                {'$set': {'last_login': now, 'updated_at': now}}
            )
            if result.modified_count > 0:
                logger.debug("Updated last_login", extra={"userId": user_id})
                return True
            return False
        except PyMongoError as e:
            logger.error("Failed to update last_login", extra={"userId": user_id, "error": str(e)})
            return False

    def set_reset_token(self, user_id: str, token: str, expiry: datetime) -> bool:
        """Store reset token and expiry in one update."""
        try:
            result = self.collection.update_one(
                {'_id': user_id},
                {'$set': {
                    'reset_token': token,
                    'reset_expiry': expiry,
                    'updated_at': datetime.now(timezone.utc),
                }}
            )
        except PyMongoError as e:
            logger.error("Failed to store reset token", extra={"userId": user_id, "error": str(e)})
            raise PersistenceError("Failed to store reset token") from e
        return result.matched_count > 0

    def consume_reset_token(self, token: str, now: datetime, password_hash: str) -> User | None:
        """Swap the password hash and clear the reset fields in a single find_one_and_update.

        The filter re-checks token and expiry, so a second caller with the same
        token finds nothing once the first has cleared it.
        """
        try:
            doc = self.collection.find_one_and_update(
                {'reset_token': token, 'reset_expiry': {'$gt': now}},
                {
                    '$set': {'password_hash': password_hash, 'updated_at': now},
                    '$unset': {'reset_token': '', 'reset_expiry': ''},
                },
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            logger.error("Failed to consume reset token", extra={"error": str(e)})
            raise PersistenceError("Failed to update password") from e

        if not doc:
            return None
        logger.info("Password reset committed", extra={"userId": doc['_id']})
        return self._to_domain(doc)

    def consume_verification_token(self, token: str) -> User | None:
        """Mark the account verified and clear its verification token."""
        try:
            doc = self.collection.find_one_and_update(
                {'verification_token': token},
                {
                    '$set': {'is_verified': True, 'updated_at': datetime.now(timezone.utc)},
                    '$unset': {'verification_token': ''},
                },
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            logger.error("Failed to consume verification token", extra={"error": str(e)})
            raise PersistenceError("Failed to verify account") from e

        if not doc:
            return None
        logger.info("Account verified", extra={"userId": doc['_id']})
        return self._to_domain(doc)

    # ── read operations ──────────────────────────────────────

    def get_by_email(self, email: str) -> User | None:
        """Find a user by email. Return User or None if not found."""
        return self._find_one({'email': email}, "Failed to get user by email", {"email": email})

    def get_by_id(self, user_id: str) -> User | None:
        """Find a user by ID. Return User or None if not found."""
        return self._find_one({'_id': user_id}, "Failed to get user by ID", {"userId": user_id})

    def get_by_reset_token(self, token: str, now: datetime) -> User | None:
        """Find the user holding `token` as an unexpired reset token."""
        return self._find_one(
            {'reset_token': token, 'reset_expiry': {'$gt': now}},
            "Failed to get user by reset token",
            {},
        )

    def _find_one(self, query: dict, error_message: str, context: dict) -> User | None:
        try:
            doc = self.collection.find_one(query)
        except PyMongoError as e:
            logger.error(error_message, extra={**context, "error": str(e)})
            raise PersistenceError(error_message) from e
        return self._to_domain(doc) if doc else None


def _as_utc(value: datetime | None) -> datetime | None:
    """PyMongo returns naive UTC datetimes unless tz_aware is set on the client."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
