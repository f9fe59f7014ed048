from adapter.mongodb.connection import USERS_COLLECTION_NAME

__all__ = ['USERS_COLLECTION_NAME']
