"""記憶體儲存端實作。

用於開發與測試環境，資料存在記憶體中，程序結束即消失。
行為模擬 Redis 的 list 與 string 型別，型別不符時拋出與 Redis 相同的 ResponseError。
"""

from __future__ import annotations

import logging
from typing import Any

from redis.exceptions import ResponseError

logger = logging.getLogger(__name__)

_WRONGTYPE = 'WRONGTYPE Operation against a key holding the wrong kind of value'


def _to_bytes(value: bytes | bytearray | memoryview | str | int | float) -> bytes:
    """依 redis-py 的編碼規則將值轉為 bytes。"""
    if isinstance(value, bytes):
        return value
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        return value.encode('utf-8')
    return repr(value).encode('utf-8')


class MemoryPipeline:
    """記憶體批次指令。

    指令先暫存，``execute`` 時在單一事件迴圈步驟內依序執行，
    期間不會讓出控制權，因此對其他協程而言是不可分割的。
    """

    def __init__(self, store: MemoryStore) -> None:
        self._store = store
        self._commands: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = []

    def _queue(self, command: str, *args: Any, **kwargs: Any) -> MemoryPipeline:
        self._commands.append((command, args, kwargs))
        return self

    def exists(self, *names: str) -> MemoryPipeline:
        return self._queue('exists', *names)

    def get(self, name: str) -> MemoryPipeline:
        return self._queue('get', name)

    def set(self, name: str, value: bytes | str, *, nx: bool = False) -> MemoryPipeline:
        return self._queue('set', name, value, nx=nx)

    def delete(self, *names: str) -> MemoryPipeline:
        return self._queue('delete', *names)

    async def execute(self) -> list[Any]:
        """依序執行暫存指令並清空佇列。"""
        commands, self._commands = self._commands, []
        results: list[Any] = []
        for command, args, kwargs in commands:
            handler = getattr(self._store, f'_{command}')
            results.append(handler(*args, **kwargs))
        return results

    async def __aenter__(self) -> MemoryPipeline:
        return self

    async def __aexit__(self, *args: Any) -> None:
        self._commands = []


class MemoryStore:
    """記憶體儲存端。

    將 string 與 list 存在同一個 dict 中，方法簽章與 ``redis.asyncio.Redis`` 相同。
    """

    def __init__(self) -> None:
        self._data: dict[str, bytes | list[bytes]] = {}
        self.closed = False

    # =========================================================================
    # 同步實作（供 pipeline 共用）
    # =========================================================================

    def _exists(self, *names: str) -> int:
        return sum(1 for name in names if name in self._data)

    def _get(self, name: str) -> bytes | None:
        value = self._data.get(name)
        if isinstance(value, list):
            raise ResponseError(_WRONGTYPE)
        return value

    def _set(self, name: str, value: bytes | str, *, nx: bool = False) -> bool | None:
        if nx and name in self._data:
            return None
        self._data[name] = _to_bytes(value)
        return True

    def _delete(self, *names: str) -> int:
        deleted = 0
        for name in names:
            if self._data.pop(name, None) is not None:
                deleted += 1
        return deleted

    def _list(self, name: str) -> list[bytes] | None:
        value = self._data.get(name)
        if value is not None and not isinstance(value, list):
            raise ResponseError(_WRONGTYPE)
        return value

    def _rpush(self, name: str, *values: bytes) -> int:
        items = self._list(name)
        if items is None:
            items = []
            self._data[name] = items
        items.extend(_to_bytes(v) for v in values)
        return len(items)

    def _llen(self, name: str) -> int:
        items = self._list(name)
        return len(items) if items is not None else 0

    def _lindex(self, name: str, index: int) -> bytes | None:
        items = self._list(name)
        if items is None:
            return None
        # Redis 支援負數索引
        if -len(items) <= index < len(items):
            return items[index]
        return None

    # =========================================================================
    # 非同步介面
    # =========================================================================

    async def exists(self, *names: str) -> int:
        return self._exists(*names)

    async def get(self, name: str) -> bytes | None:
        return self._get(name)

    async def set(self, name: str, value: bytes | str, *, nx: bool = False) -> bool | None:
        return self._set(name, value, nx=nx)

    async def delete(self, *names: str) -> int:
        return self._delete(*names)

    async def rpush(self, name: str, *values: bytes) -> int:
        return self._rpush(name, *values)

    async def llen(self, name: str) -> int:
        return self._llen(name)

    async def lindex(self, name: str, index: int) -> bytes | None:
        return self._lindex(name, index)

    def pipeline(self, transaction: bool = True) -> MemoryPipeline:
        # 記憶體實作的批次指令本來就不可分割，transaction 參數僅為相容
        return MemoryPipeline(self)

    async def aclose(self) -> None:
        self.closed = True
        logger.debug('記憶體儲存端已關閉', extra={'keys': len(self._data)})
