"""Redis 儲存端。

建立 ``redis.asyncio.Redis`` client，並將 redis 例外轉換為 provider-agnostic 的例外。
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

import redis.asyncio as redis
from redis.exceptions import RedisError

from stream_store.config import StoreConfig
from stream_store.exceptions import StoreConnectionError

logger = logging.getLogger(__name__)


def create_redis_client(config: StoreConfig) -> redis.Redis:
    """依配置建立 Redis 非同步 client。

    Args:
        config: 連線配置

    Returns:
        以 raw bytes 模式運作的 Redis client
    """
    client = redis.Redis(**config.to_client_kwargs())
    logger.info(
        'Redis client 已建立',
        extra={'host': config.host, 'port': config.port, 'db': config.db},
    )
    return client


@contextmanager
def store_errors(operation: str, key: str) -> Iterator[None]:
    """將區塊內拋出的 redis 例外轉換為 StoreConnectionError。

    Args:
        operation: 操作名稱（用於錯誤訊息）
        key: 串流識別符

    Raises:
        StoreConnectionError: 區塊內發生任何 RedisError
    """
    try:
        yield
    except RedisError as e:
        raise StoreConnectionError(f'{operation} 失敗（{key}）: {e}') from e
