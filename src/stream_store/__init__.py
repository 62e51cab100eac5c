"""以 Redis list 承載的二進位串流儲存。

提供分塊寫入、依序讀回、metadata 與刪除等操作。
"""

from stream_store.client import StreamStore
from stream_store.config import StoreConfig
from stream_store.exceptions import (
    MetadataSerializationError,
    StoreConnectionError,
    StreamClosedError,
    StreamStoreError,
)
from stream_store.keys import StreamKeys
from stream_store.reader import StreamReader
from stream_store.store import MemoryStore
from stream_store.writer import StreamWriter

__all__ = [
    'MemoryStore',
    'MetadataSerializationError',
    'StoreConfig',
    'StoreConnectionError',
    'StreamClosedError',
    'StreamKeys',
    'StreamReader',
    'StreamStore',
    'StreamStoreError',
    'StreamWriter',
]
