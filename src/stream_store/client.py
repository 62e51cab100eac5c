"""串流儲存入口。

將讀取端、寫入端、metadata 與刪除操作綁定到同一個儲存端 client。
Client 由 ``StreamStore`` 明確持有，生命週期由呼叫端以 ``close()`` 或 ``async with`` 管理。
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import TracebackType
from typing import Any

from stream_store import meta
from stream_store.config import StoreConfig
from stream_store.keys import StreamKeys, check_namespace
from stream_store.lifecycle import delete_stream
from stream_store.reader import StreamReader
from stream_store.store.base import StoreClient
from stream_store.store.redis_backend import create_redis_client, store_errors
from stream_store.writer import StreamWriter

logger = logging.getLogger(__name__)


class StreamStore:
    """以 key-value 儲存端承載的二進位串流。

    Attributes:
        client: 儲存端 client
        namespace: key 前綴
    """

    def __init__(self, client: StoreClient, namespace: str = '') -> None:
        """初始化串流儲存。

        Args:
            client: 儲存端 client（``redis.asyncio.Redis`` 或 ``MemoryStore``）
            namespace: key 前綴

        Raises:
            ValueError: namespace 含有冒號
        """
        self.client = client
        self.namespace = check_namespace(namespace)

    @classmethod
    def from_config(cls, config: StoreConfig) -> StreamStore:
        """依配置建立 Redis client 並包裝為串流儲存。"""
        check_namespace(config.namespace)
        return cls(create_redis_client(config), namespace=config.namespace)

    def keys(self, key: str) -> StreamKeys:
        """回傳串流對應的 Redis key。"""
        return StreamKeys.for_stream(key, self.namespace)

    def create_read_stream(self, key: str, start_index: int = 0) -> StreamReader:
        """建立讀取端。

        Args:
            key: 串流識別符
            start_index: 起始區塊索引

        Returns:
            產生 bytes 的非同步迭代器
        """
        return StreamReader(self.client, self.keys(key), start_index=start_index)

    def create_write_stream(
        self,
        key: str,
        append: bool = False,
        strict: bool = False,
    ) -> StreamWriter:
        """建立寫入端。

        Args:
            key: 串流識別符
            append: 為 True 時保留既有區塊並接續追加
            strict: 為 True 時區塊追加失敗會拋出例外

        Returns:
            寫入端
        """
        return StreamWriter(self.client, self.keys(key), append=append, strict=strict)

    async def delete(self, key: str) -> bool:
        """刪除串流的所有資料。"""
        return await delete_stream(self.client, self.keys(key))

    async def set_meta(self, key: str, data: Mapping[str, Any]) -> bool:
        """覆寫串流 metadata，串流不存在時回傳 False。"""
        return await meta.set_meta(self.client, self.keys(key), data)

    async def get_meta(self, key: str) -> dict[str, Any] | None:
        """讀取合併後的 metadata，串流不存在時回傳 None。"""
        return await meta.get_meta(self.client, self.keys(key))

    async def exists(self, key: str) -> bool:
        """串流是否存在（以建立記錄判斷）。"""
        return await meta.stream_exists(self.client, self.keys(key))

    async def length(self, key: str) -> int:
        """目前的區塊數。"""
        keys = self.keys(key)
        with store_errors('讀取串流長度', key):
            return await self.client.llen(keys.chunks)

    async def close(self) -> None:
        """關閉儲存端連線。"""
        await self.client.aclose()
        logger.info('串流儲存已關閉')

    async def __aenter__(self) -> StreamStore:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()
