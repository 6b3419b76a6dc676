from cartapi.storage.base import CartStorage, RecordConflict, RecordNotFound, StorageError
from cartapi.storage.sql import SQLStorage

__all__ = [
    "CartStorage",
    "RecordConflict",
    "RecordNotFound",
    "StorageError",
    "SQLStorage",
]
