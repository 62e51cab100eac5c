"""全域測試設定。"""

from __future__ import annotations

import pytest
from dotenv import load_dotenv

from stream_store import MemoryStore, StreamStore

# 載入 .env，確保 smoke test 也能讀取 Redis 連線設定
load_dotenv()


def pytest_addoption(parser: pytest.Parser) -> None:
    """新增自訂命令列參數。"""
    parser.addoption(
        '--run-smoke',
        action='store_true',
        default=False,
        help='執行 smoke test（會連線真實 Redis）',
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """根據命令列參數決定是否跳過 smoke test。"""
    if config.getoption('--run-smoke'):
        return

    skip_smoke = pytest.mark.skip(reason='需要加 --run-smoke 才會執行')
    for item in items:
        if 'smoke' in item.keywords:
            item.add_marker(skip_smoke)


@pytest.fixture
def memory() -> MemoryStore:
    """建立空的記憶體儲存端。"""
    return MemoryStore()


@pytest.fixture
def store(memory: MemoryStore) -> StreamStore:
    """建立以記憶體儲存端為底層的串流儲存。"""
    return StreamStore(memory)
