"""记录存储层：统一接口 + 可切换后端。"""
from .base import (
    RecordStore, RecordStoreError, RecordNotFoundError,
    DuplicateRecordError, UnknownRecordKindError, StoreSnapshot,
)
from .factory import create_store
from .memory import MemoryStore

__all__ = [
    "RecordStore", "RecordStoreError", "RecordNotFoundError",
    "DuplicateRecordError", "UnknownRecordKindError", "StoreSnapshot",
    "create_store", "MemoryStore",
]
