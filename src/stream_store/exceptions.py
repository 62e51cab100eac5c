"""串流儲存例外模組。

定義與底層 Redis SDK 無關的例外類別，讓呼叫端不需要依賴 redis 的例外階層。
"""

from __future__ import annotations


class StreamStoreError(Exception):
    """串流儲存基礎例外。"""


class StoreConnectionError(StreamStoreError):
    """儲存端無法連線或指令執行失敗。"""


class MetadataSerializationError(StreamStoreError):
    """Root 或 Metadata 記錄不是合法的 JSON 物件。"""


class StreamClosedError(StreamStoreError):
    """對已結束的寫入串流繼續寫入。"""
