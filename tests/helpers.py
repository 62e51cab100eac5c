"""測試輔助函數。"""

from __future__ import annotations

import random
from collections.abc import AsyncIterator, Iterable

from stream_store import StreamStore


def make_payload(size: int, seed: int = 42) -> bytes:
    """產生固定種子的隨機 bytes。"""
    return random.Random(seed).randbytes(size)


def split_chunks(data: bytes, size: int) -> list[bytes]:
    """將資料切成固定大小的區塊。"""
    return [data[i : i + size] for i in range(0, len(data), size)]


async def as_async(chunks: Iterable[bytes]) -> AsyncIterator[bytes]:
    """將同步區塊來源轉為非同步來源。"""
    for chunk in chunks:
        yield chunk


async def write_chunks(store: StreamStore, key: str, chunks: Iterable[bytes]) -> None:
    """寫入一組區塊並結束 session。"""
    async with store.create_write_stream(key) as writer:
        for chunk in chunks:
            await writer.write(chunk)


async def read_chunks(store: StreamStore, key: str, start_index: int = 0) -> list[bytes]:
    """讀回所有區塊。"""
    return [chunk async for chunk in store.create_read_stream(key, start_index=start_index)]
