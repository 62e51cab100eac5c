"""FastAPI 應用程序入口。

以 HTTP 提供串流上傳、下載、metadata 與刪除端點。
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from dotenv import load_dotenv
from fastapi import APIRouter, Body, Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel

from stream_store.client import StreamStore
from stream_store.config import StoreConfig
from stream_store.exceptions import MetadataSerializationError, StoreConnectionError

# 在讀取配置之前加載 .env
load_dotenv()

logger = logging.getLogger(__name__)

router = APIRouter()


# --- 回應模型 ---
class WriteResult(BaseModel):
    """上傳結果。"""

    key: str
    chunks: int
    size: int
    failed_appends: int


class MetaResult(BaseModel):
    """metadata 寫入結果。"""

    applied: bool


class DeleteResult(BaseModel):
    """刪除結果。"""

    deleted: bool


def get_store(request: Request) -> StreamStore:
    """取得應用程序持有的串流儲存。"""
    store: StreamStore = request.app.state.store
    return store


# --- API 路由 ---
@router.put('/streams/{key}')
async def upload_stream(
    key: str,
    request: Request,
    append: bool = Query(default=False),
    store: StreamStore = Depends(get_store),
) -> WriteResult:
    """將請求本體以串流方式寫入。

    Args:
        key: 串流識別符
        request: HTTP 請求（本體逐塊讀取）
        append: 是否接續既有串流
        store: 串流儲存

    Returns:
        上傳結果
    """
    writer = store.create_write_stream(key, append=append)
    await writer.write_from(request.stream())
    logger.info(
        '串流已上傳',
        extra={'stream': key, 'chunks': writer.chunks_written, 'size': writer.bytes_written},
    )
    return WriteResult(
        key=key,
        chunks=writer.chunks_written,
        size=writer.bytes_written,
        failed_appends=writer.failed_appends,
    )


@router.get('/streams/{key}', response_model=None)
async def download_stream(
    key: str,
    start_index: int = Query(default=0, ge=0),
    store: StreamStore = Depends(get_store),
) -> StreamingResponse | JSONResponse:
    """以串流方式讀回內容。

    Args:
        key: 串流識別符
        start_index: 起始區塊索引
        store: 串流儲存

    Returns:
        二進位串流回應；串流不存在時回傳 404
    """
    if not await store.exists(key):
        return JSONResponse({'error': '串流不存在', 'key': key}, status_code=404)

    reader = store.create_read_stream(key, start_index=start_index)
    return StreamingResponse(reader, media_type='application/octet-stream')


@router.delete('/streams/{key}')
async def remove_stream(key: str, store: StreamStore = Depends(get_store)) -> DeleteResult:
    """刪除串流。"""
    return DeleteResult(deleted=await store.delete(key))


@router.get('/streams/{key}/meta', response_model=None)
async def read_meta(
    key: str,
    store: StreamStore = Depends(get_store),
) -> dict[str, Any] | JSONResponse:
    """讀取合併後的 metadata，串流不存在時回傳 404。"""
    data = await store.get_meta(key)
    if data is None:
        return JSONResponse({'error': '串流不存在', 'key': key}, status_code=404)
    return data


@router.put('/streams/{key}/meta', response_model=None)
async def write_meta(
    key: str,
    data: dict[str, Any] = Body(...),
    store: StreamStore = Depends(get_store),
) -> MetaResult | JSONResponse:
    """覆寫 metadata，串流不存在時回傳 404。"""
    if not await store.set_meta(key, data):
        return JSONResponse({'applied': False}, status_code=404)
    return MetaResult(applied=True)


@router.get('/health')
async def health() -> JSONResponse:
    """健康檢查端點。"""
    return JSONResponse({'status': 'healthy'})


# --- 例外處理 ---
async def _store_unavailable(request: Request, exc: Exception) -> JSONResponse:
    logger.warning('儲存端錯誤', extra={'path': request.url.path, 'error': str(exc)})
    return JSONResponse({'error': type(exc).__name__, 'message': str(exc)}, status_code=503)


async def _bad_record(request: Request, exc: Exception) -> JSONResponse:
    # 只有已存放的記錄損毀才會走到這裡，請求本體已由 FastAPI 驗證為物件
    return JSONResponse({'error': type(exc).__name__, 'message': str(exc)}, status_code=500)


def create_app(store: StreamStore | None = None) -> FastAPI:
    """建立 FastAPI 應用程序。

    Args:
        store: 外部注入的串流儲存；未指定時於啟動時依環境變數建立，並於關閉時釋放

    Returns:
        FastAPI 應用程序
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """應用程序生命週期管理。"""
        owned = store is None
        if owned:
            app.state.store = StreamStore.from_config(StoreConfig.from_env())
        logger.info('應用程序啟動')

        yield

        if owned:
            await app.state.store.close()
        logger.info('應用程序關閉')

    app = FastAPI(title='Stream Store API', lifespan=lifespan)
    if store is not None:
        app.state.store = store
    app.include_router(router)
    app.add_exception_handler(StoreConnectionError, _store_unavailable)
    app.add_exception_handler(MetadataSerializationError, _bad_record)
    return app


app = create_app()
