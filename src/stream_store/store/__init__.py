"""儲存端抽象層。

提供串流核心所需的最小指令介面，支援記憶體與 Redis 兩種實作。
"""

from stream_store.store.base import StoreClient, StorePipeline
from stream_store.store.memory import MemoryStore
from stream_store.store.redis_backend import create_redis_client, store_errors

__all__ = ['MemoryStore', 'StoreClient', 'StorePipeline', 'create_redis_client', 'store_errors']
