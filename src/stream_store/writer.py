"""串流寫入端。

將一連串 bytes 依序寫成 Redis list 中的區塊。每個寫入 session 的第一個非空區塊
會先清除同名串流的舊資料並寫入建立記錄，之後每個區塊追加為 list 的下一個元素。
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import AsyncIterable, Iterable
from types import TracebackType

from stream_store.exceptions import StoreConnectionError, StreamClosedError
from stream_store.keys import StreamKeys
from stream_store.lifecycle import delete_stream
from stream_store.store.base import StoreClient
from stream_store.store.redis_backend import store_errors

logger = logging.getLogger(__name__)

Chunk = bytes | bytearray | memoryview | str


def _now_ms() -> int:
    """目前時間（epoch 毫秒）。"""
    return int(time.time() * 1000)


class StreamWriter:
    """Redis 串流寫入端。

    ``await write()`` 在區塊被儲存端確認後才返回，呼叫端以此作為背壓。
    同一個寫入端的並行 ``write()`` 會依呼叫順序逐一執行。

    Args:
        client: 儲存端 client
        keys: 串流 key 組合
        append: 為 True 時不清除舊資料，區塊接在既有區塊之後
        strict: 為 True 時追加失敗會拋出例外；預設只記錄警告並繼續
        encoding: str 區塊的編碼
    """

    def __init__(
        self,
        client: StoreClient,
        keys: StreamKeys,
        *,
        append: bool = False,
        strict: bool = False,
        encoding: str = 'utf-8',
    ) -> None:
        self._client = client
        self._keys = keys
        self._append = append
        self._strict = strict
        self._encoding = encoding
        self._lock = asyncio.Lock()
        self._initial = True
        self._closed = False
        self._finished = False
        self.chunks_written = 0
        self.bytes_written = 0
        self.failed_appends = 0

    @property
    def key(self) -> str:
        return self._keys.name

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def finished(self) -> bool:
        """來源已結束且所有追加都已完成。"""
        return self._finished

    async def _start_session(self) -> None:
        """清除舊資料（非 append 模式）並寫入建立記錄。"""
        if not self._append:
            await delete_stream(self._client, self._keys)

        # 建立記錄是串流存在與否的判斷依據
        root = json.dumps({'created': _now_ms()})
        with store_errors('寫入建立記錄', self._keys.name):
            await self._client.set(self._keys.root, root.encode('utf-8'), nx=self._append)

        logger.debug(
            '寫入 session 開始',
            extra={'stream': self._keys.name, 'append': self._append},
        )

    async def _append_chunk(self, data: bytes) -> None:
        try:
            with store_errors('追加區塊', self._keys.name):
                await self._client.rpush(self._keys.chunks, data)
        except StoreConnectionError as e:
            if self._strict:
                raise
            self.failed_appends += 1
            logger.warning(
                '區塊追加失敗，略過此區塊',
                extra={'stream': self._keys.name, 'size': len(data), 'error': str(e)},
            )
            return

        self.chunks_written += 1
        self.bytes_written += len(data)

    async def write(self, chunk: Chunk | None) -> None:
        """寫入一個區塊。

        空區塊不產生任何儲存端操作。

        Args:
            chunk: 區塊內容，str 會依 encoding 轉為 bytes

        Raises:
            StreamClosedError: 寫入端已結束
            StoreConnectionError: 清除舊資料或寫入建立記錄失敗；strict 模式下追加失敗
        """
        if self._closed:
            raise StreamClosedError(f'寫入端已結束（{self._keys.name}）')

        if not chunk:
            return

        if isinstance(chunk, str):
            data = chunk.encode(self._encoding)
        else:
            data = bytes(chunk)

        async with self._lock:
            # 等待期間可能已被其他 write() 關閉
            if self._closed:
                raise StreamClosedError(f'寫入端已結束（{self._keys.name}）')

            if self._initial:
                try:
                    await self._start_session()
                except StoreConnectionError:
                    # session 建立失敗後寫入端不可再使用
                    self._closed = True
                    raise
                self._initial = False

            await self._append_chunk(data)

    async def write_from(
        self,
        source: AsyncIterable[Chunk] | Iterable[Chunk],
        *,
        finish: bool = True,
    ) -> int:
        """將來源的所有區塊依序寫入。

        Args:
            source: 同步或非同步的區塊來源
            finish: 來源結束後是否呼叫 ``finish()``

        Returns:
            本次成功追加的區塊數
        """
        before = self.chunks_written
        if isinstance(source, AsyncIterable):
            async for chunk in source:
                await self.write(chunk)
        else:
            for chunk in source:
                await self.write(chunk)

        if finish:
            await self.finish()
        return self.chunks_written - before

    async def finish(self) -> None:
        """結束寫入 session。重複呼叫無作用。"""
        if self._finished:
            return
        self._closed = True
        self._finished = True
        logger.debug(
            '寫入 session 完成',
            extra={
                'stream': self._keys.name,
                'chunks': self.chunks_written,
                'bytes': self.bytes_written,
                'failed_appends': self.failed_appends,
            },
        )

    async def __aenter__(self) -> StreamWriter:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc_type is None:
            await self.finish()
        else:
            # 已寫入的區塊保留，不回滾
            self._closed = True
