"""串流 metadata 讀寫。

Metadata 以 JSON 物件存放，讀取時與建立記錄合併：
建立記錄的欄位為基底，metadata 欄位覆寫或擴充。
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from stream_store.exceptions import MetadataSerializationError
from stream_store.keys import StreamKeys
from stream_store.store.base import StoreClient
from stream_store.store.redis_backend import store_errors

logger = logging.getLogger(__name__)


def _parse_record(raw: bytes | None, record: str, keys: StreamKeys) -> dict[str, Any]:
    """解析 JSON 記錄，空值視為空物件。

    Raises:
        MetadataSerializationError: 內容不是合法 JSON 或不是 JSON 物件
    """
    if not raw:
        return {}

    try:
        data = json.loads(raw)
    except ValueError as e:
        raise MetadataSerializationError(f'{record} 記錄不是合法 JSON（{keys.name}）') from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise MetadataSerializationError(f'{record} 記錄不是 JSON 物件（{keys.name}）')
    return data


async def stream_exists(client: StoreClient, keys: StreamKeys) -> bool:
    """檢查建立記錄是否存在。"""
    with store_errors('檢查串流', keys.name):
        return bool(await client.exists(keys.root))


async def set_meta(client: StoreClient, keys: StreamKeys, data: Mapping[str, Any]) -> bool:
    """覆寫串流的 metadata。

    每次寫入都整筆取代，不與既有 metadata 合併。

    Args:
        client: 儲存端 client
        keys: 串流 key 組合
        data: 可 JSON 序列化的物件

    Returns:
        寫入成功回傳 True；串流不存在時不寫入並回傳 False

    Raises:
        MetadataSerializationError: data 不是物件或無法序列化
        StoreConnectionError: 儲存端指令失敗
    """
    if not await stream_exists(client, keys):
        logger.debug('串流不存在，略過 metadata 寫入', extra={'stream': keys.name})
        return False

    if not isinstance(data, Mapping):
        raise MetadataSerializationError(f'metadata 必須是物件，收到 {type(data).__name__}')

    try:
        serialized = json.dumps(dict(data), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise MetadataSerializationError(f'metadata 無法序列化（{keys.name}）: {e}') from e

    with store_errors('寫入 metadata', keys.name):
        await client.set(keys.meta, serialized.encode('utf-8'))

    logger.debug('metadata 已寫入', extra={'stream': keys.name, 'fields': len(data)})
    return True


async def get_meta(client: StoreClient, keys: StreamKeys) -> dict[str, Any] | None:
    """讀取合併後的 metadata。

    存在檢查、建立記錄與 metadata 在同一個唯讀批次內讀取。

    Args:
        client: 儲存端 client
        keys: 串流 key 組合

    Returns:
        合併後的新 dict；串流不存在時回傳 None

    Raises:
        MetadataSerializationError: 任一記錄不是合法的 JSON 物件
        StoreConnectionError: 儲存端指令失敗
    """
    with store_errors('讀取 metadata', keys.name):
        async with client.pipeline(transaction=True) as pipe:
            exists, root_raw, meta_raw = (
                await pipe.exists(keys.root).get(keys.root).get(keys.meta).execute()
            )

    if not exists:
        return None

    merged = _parse_record(root_raw, 'root', keys)
    merged.update(_parse_record(meta_raw, 'meta', keys))
    return merged
