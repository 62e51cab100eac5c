"""串流生命週期管理。"""

from __future__ import annotations

import logging

from stream_store.keys import StreamKeys
from stream_store.store.base import StoreClient
from stream_store.store.redis_backend import store_errors

logger = logging.getLogger(__name__)


async def delete_stream(client: StoreClient, keys: StreamKeys) -> bool:
    """以單一批次刪除串流的區塊列表、建立記錄與 metadata。

    刪除不存在的 key 不算錯誤。

    Args:
        client: 儲存端 client
        keys: 串流 key 組合

    Returns:
        批次執行完成即回傳 True

    Raises:
        StoreConnectionError: 批次執行失敗
    """
    with store_errors('刪除串流', keys.name):
        async with client.pipeline(transaction=True) as pipe:
            results = await pipe.delete(keys.chunks).delete(keys.root).delete(keys.meta).execute()

    logger.debug('串流已刪除', extra={'stream': keys.name, 'removed': sum(results)})
    return True
