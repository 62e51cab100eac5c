"""串流讀取端。

依索引順序逐一讀回區塊。讀取長度在第一次取值時決定，之後新增的區塊不會被讀到。
"""

from __future__ import annotations

import logging

from stream_store.exceptions import StoreConnectionError
from stream_store.keys import StreamKeys
from stream_store.store.base import StoreClient
from stream_store.store.redis_backend import store_errors

logger = logging.getLogger(__name__)


class StreamReader:
    """Redis 串流讀取端。

    非同步迭代器，每次 ``__anext__`` 只發出一個 LINDEX，消費端不取值時不會預讀。
    迭代結束後不可重新開始。

    Args:
        client: 儲存端 client
        keys: 串流 key 組合
        start_index: 起始區塊索引，用於續傳或部分讀取
    """

    def __init__(self, client: StoreClient, keys: StreamKeys, *, start_index: int = 0) -> None:
        if isinstance(start_index, bool) or not isinstance(start_index, int) or start_index < 0:
            raise ValueError(f'start_index 必須是非負整數，收到 {start_index!r}')
        self._client = client
        self._keys = keys
        self._index = start_index
        self._length: int | None = None
        self._finished = False

    @property
    def key(self) -> str:
        return self._keys.name

    @property
    def index(self) -> int:
        """下一個要讀取的區塊索引。"""
        return self._index

    @property
    def length(self) -> int | None:
        """讀取開始時的區塊數；尚未開始讀取時為 None。"""
        return self._length

    def __aiter__(self) -> StreamReader:
        return self

    async def __anext__(self) -> bytes:
        if self._finished:
            raise StopAsyncIteration

        try:
            if self._length is None:
                with store_errors('讀取串流長度', self._keys.name):
                    self._length = await self._client.llen(self._keys.chunks)
                logger.debug(
                    '讀取 session 開始',
                    extra={'stream': self._keys.name, 'length': self._length, 'start': self._index},
                )

            if self._index >= self._length:
                self._finished = True
                raise StopAsyncIteration

            index = self._index
            self._index += 1
            with store_errors('讀取區塊', self._keys.name):
                chunk = await self._client.lindex(self._keys.chunks, index)
        except StoreConnectionError:
            self._finished = True
            raise

        if chunk is None:
            # 讀取途中串流被刪除或截短
            self._finished = True
            logger.debug(
                '區塊已不存在，提前結束',
                extra={'stream': self._keys.name, 'index': index},
            )
            raise StopAsyncIteration

        return chunk

    async def read_all(self) -> bytes:
        """讀取剩餘所有區塊並串接。"""
        return b''.join([chunk async for chunk in self])
