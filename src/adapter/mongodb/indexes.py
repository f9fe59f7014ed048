"""MongoDB index management.

Repositories declare their indexes through create_index_safe so that a
renamed or re-keyed index does not block startup.
"""

from logging import getLogger

from pymongo.errors import PyMongoError

logger = getLogger(__name__)


def create_index_safe(collection, keys: list, name: str, **kwargs) -> bool:
    """Create an index, replacing an existing one that conflicts by name or key spec."""
    try:
        collection.create_index(keys, name=name, **kwargs)
        return True
    except PyMongoError as e:
        if "already exists" not in str(e) and "Conflict" not in str(e):
            raise
        return _replace_conflicting(collection, keys, name, **kwargs)


def _replace_conflicting(collection, keys: list, name: str, **kwargs) -> bool:
    wanted = dict(keys)

    for existing_name, info in collection.index_information().items():
        if existing_name == '_id_':
            continue

        same_name = existing_name == name
        same_keys = dict(info.get('key', [])) == wanted
        if same_name != same_keys:
            logger.warning("Dropping conflicting index", extra={"index": existing_name})
            collection.drop_index(existing_name)
            collection.create_index(keys, name=name, **kwargs)
            logger.info("Recreated index", extra={"index": name})
            return True

    logger.error("Failed to resolve index conflict", extra={"index": name})
    return False


def ensure_all_indexes(db) -> bool:
    """Ensure indexes for all collections. Called at app startup."""
    from adapter.mongodb.user_repository import MongoUserRepository

    return MongoUserRepository(db).ensure_indexes()
