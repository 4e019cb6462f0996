from .persistent import PersistentStore, InMemoryStore, JsonFileStore
from .records import LocalRecordStore, is_local_id

__all__ = [
    "PersistentStore",
    "InMemoryStore",
    "JsonFileStore",
    "LocalRecordStore",
    "is_local_id",
]
