"""串流儲存配置模組。

提供連線 Redis 所需的配置資料結構，支援 URL 與環境變數兩種來源。
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlparse

# 預設值
DEFAULT_REDIS_URL = 'redis://localhost:6379/0'
DEFAULT_HOST = 'localhost'
DEFAULT_PORT = 6379

# 環境變數名稱
ENV_REDIS_URL = 'STREAM_STORE_REDIS_URL'
ENV_NAMESPACE = 'STREAM_STORE_NAMESPACE'


@dataclass
class StoreConfig:
    """Redis 連線配置。

    除了 ``decode_responses`` 會被強制關閉外，其餘設定原封不動傳給 redis client。

    Attributes:
        host: Redis 主機
        port: Redis 連接埠
        db: 資料庫編號
        password: 密碼（可選）
        namespace: key 前綴（可選），用於隔離不同應用的串流
        socket_timeout: 指令逾時秒數（可選，None 表示不設限）
        client_options: 其他直接傳給 redis client 的參數
    """

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    db: int = 0
    password: str | None = None
    namespace: str = ''
    socket_timeout: float | None = None
    client_options: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_url(cls, url: str, namespace: str = '') -> StoreConfig:
        """從 Redis URL 建立配置。

        Args:
            url: 形如 ``redis://[:password@]host:port/db`` 的連線 URL
            namespace: key 前綴

        Returns:
            對應的配置物件

        Raises:
            ValueError: URL scheme 不是 redis 或 rediss
        """
        parsed = urlparse(url)
        if parsed.scheme not in ('redis', 'rediss'):
            raise ValueError(f'不支援的 URL scheme: {parsed.scheme!r}')

        options: dict[str, Any] = {}
        if parsed.scheme == 'rediss':
            options['ssl'] = True

        return cls(
            host=parsed.hostname or DEFAULT_HOST,
            port=parsed.port or DEFAULT_PORT,
            db=int(parsed.path.lstrip('/') or 0),
            password=parsed.password,
            namespace=namespace,
            client_options=options,
        )

    @classmethod
    def from_env(cls) -> StoreConfig:
        """從環境變數建立配置，未設定時使用預設 URL。

        Returns:
            對應的配置物件
        """
        url = os.environ.get(ENV_REDIS_URL, DEFAULT_REDIS_URL)
        namespace = os.environ.get(ENV_NAMESPACE, '')
        return cls.from_url(url, namespace=namespace)

    def to_client_kwargs(self) -> dict[str, Any]:
        """轉換為 redis client 的建構參數。

        Returns:
            建構參數 dict，``decode_responses`` 固定為 False 以取得原始 bytes
        """
        kwargs: dict[str, Any] = dict(self.client_options)
        kwargs.update(
            host=self.host,
            port=self.port,
            db=self.db,
            password=self.password,
            socket_timeout=self.socket_timeout,
        )
        # 串流內容是二進位資料，必須保持 raw bytes
        kwargs['decode_responses'] = False
        return kwargs
