"""儲存端介面定義。

以 redis-py asyncio client 的方法簽章為準，列出串流核心實際使用的指令子集。
``redis.asyncio.Redis`` 本身即符合此介面。
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class StorePipeline(Protocol):
    """批次指令 Protocol。

    指令方法只會暫存指令並回傳 pipeline 本身，呼叫 ``execute`` 時才一併送出。
    """

    def exists(self, *names: str) -> StorePipeline: ...

    def get(self, name: str) -> StorePipeline: ...

    def set(self, name: str, value: bytes | str) -> StorePipeline: ...

    def delete(self, *names: str) -> StorePipeline: ...

    async def execute(self) -> list[Any]:
        """送出所有暫存指令。

        Returns:
            各指令的結果，順序與加入順序一致
        """
        ...

    async def __aenter__(self) -> StorePipeline: ...

    async def __aexit__(self, *args: Any) -> None: ...


@runtime_checkable
class StoreClient(Protocol):
    """儲存端 client Protocol。"""

    async def exists(self, *names: str) -> int:
        """回傳存在的 key 數量。"""
        ...

    async def get(self, name: str) -> bytes | None:
        """讀取純量值，不存在時回傳 None。"""
        ...

    async def set(self, name: str, value: bytes | str, *, nx: bool = False) -> bool | None:
        """寫入純量值。

        Args:
            name: key
            value: 值
            nx: 為 True 時僅在 key 不存在時寫入

        Returns:
            寫入成功回傳 True；``nx`` 條件不成立時回傳 None
        """
        ...

    async def delete(self, *names: str) -> int:
        """刪除 key，回傳實際刪除的數量。"""
        ...

    async def rpush(self, name: str, *values: bytes) -> int:
        """在列表尾端追加元素，回傳追加後的長度。"""
        ...

    async def llen(self, name: str) -> int:
        """回傳列表長度，key 不存在時為 0。"""
        ...

    async def lindex(self, name: str, index: int) -> bytes | None:
        """讀取列表指定位置的元素，超出範圍時回傳 None。"""
        ...

    def pipeline(self, transaction: bool = True) -> StorePipeline:
        """建立批次指令物件。"""
        ...

    async def aclose(self) -> None:
        """關閉連線。"""
        ...
