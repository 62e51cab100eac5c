"""配置系統測試模組。

涵蓋：
- Rule: 應支援以 URL 與環境變數配置 Redis 連線
- Rule: 串流 key 應依識別符與 namespace 產生
"""

from __future__ import annotations

import os
from unittest.mock import patch

import allure
import pytest

from stream_store import MemoryStore, StreamStore
from stream_store.config import DEFAULT_PORT, ENV_NAMESPACE, ENV_REDIS_URL, StoreConfig
from stream_store.keys import StreamKeys


@allure.feature('串流儲存配置')
@allure.story('應支援以 URL 與環境變數配置 Redis 連線')
class TestStoreConfig:
    """測試 StoreConfig。"""

    @allure.title('預設配置')
    def test_defaults(self) -> None:
        """Scenario: 使用預設配置 — 應連線 localhost:6379 的 db 0。"""
        config = StoreConfig()

        assert config.host == 'localhost'
        assert config.port == DEFAULT_PORT
        assert config.db == 0
        assert config.namespace == ''
        assert config.client_options == {}
        assert config.client_options is not StoreConfig().client_options

    @allure.title('從 URL 解析主機、密碼與資料庫編號')
    def test_from_url(self) -> None:
        """Scenario: 從 URL 建立配置。"""
        config = StoreConfig.from_url('redis://:secret@cache.local:6380/12')

        assert config.host == 'cache.local'
        assert config.port == 6380
        assert config.db == 12
        assert config.password == 'secret'

    @allure.title('rediss URL 應啟用 SSL')
    def test_rediss_enables_ssl(self) -> None:
        """rediss scheme 應在 client 參數中加入 ssl。"""
        config = StoreConfig.from_url('rediss://cache.local')

        assert config.to_client_kwargs()['ssl'] is True
        assert config.port == DEFAULT_PORT

    @allure.title('不支援的 URL scheme')
    def test_invalid_scheme(self) -> None:
        """非 redis scheme 應拋出 ValueError。"""
        with pytest.raises(ValueError, match='scheme'):
            StoreConfig.from_url('http://cache.local')

    @allure.title('從環境變數讀取 URL 與 namespace')
    def test_from_env(self) -> None:
        """Scenario: 從環境變數建立配置。"""
        env = {ENV_REDIS_URL: 'redis://env-host:7000/2', ENV_NAMESPACE: 'files'}
        with patch.dict(os.environ, env):
            config = StoreConfig.from_env()

        assert config.host == 'env-host'
        assert config.port == 7000
        assert config.db == 2
        assert config.namespace == 'files'

    @allure.title('沒有環境變數時使用預設 URL')
    def test_from_env_default(self) -> None:
        """沒有設定環境變數時應使用預設值。"""
        with patch.dict(os.environ, {}, clear=True):
            config = StoreConfig.from_env()

        assert config.host == 'localhost'
        assert config.namespace == ''

    @allure.title('decode_responses 固定為 False')
    def test_raw_bytes_forced(self) -> None:
        """即使 client_options 要求解碼，仍應強制 raw bytes。"""
        config = StoreConfig(
            socket_timeout=2.5,
            client_options={'decode_responses': True, 'max_connections': 8},
        )

        kwargs = config.to_client_kwargs()

        assert kwargs['decode_responses'] is False
        assert kwargs['max_connections'] == 8
        assert kwargs['socket_timeout'] == 2.5


@allure.feature('串流儲存配置')
@allure.story('串流 key 應依識別符與 namespace 產生')
class TestStreamKeys:
    """測試 StreamKeys。"""

    @allure.title('沒有 namespace 時的 key 配置')
    def test_plain_layout(self) -> None:
        """三個 key 依序為 stream、root、meta 後綴。"""
        keys = StreamKeys.for_stream('video')

        assert keys.all() == ('video:stream', 'video:root', 'video:meta')
        assert keys.name == 'video'

    @allure.title('namespace 加在識別符之前')
    def test_namespaced_layout(self) -> None:
        """設定 namespace 時 key 應帶前綴。"""
        keys = StreamKeys.for_stream('video', namespace='media')

        assert keys.chunks == 'media:video:stream'
        assert keys.root == 'media:video:root'
        assert keys.meta == 'media:video:meta'

    @allure.title('namespace 不可含有冒號')
    def test_namespace_with_colon_rejected(self, memory: MemoryStore) -> None:
        """含冒號的 namespace 會與其他 namespace 重疊，應拋出 ValueError。"""
        with pytest.raises(ValueError, match='namespace'):
            StreamKeys.for_stream('b', namespace='x:y')
        with pytest.raises(ValueError, match='namespace'):
            StreamStore(memory, namespace='x:y')
        with pytest.raises(ValueError, match='namespace'):
            StreamStore.from_config(StoreConfig(namespace='x:y'))

    @allure.title('不同 namespace 下含冒號的識別符不互相衝突')
    def test_namespaces_isolated(self) -> None:
        """namespace x 的 y:z 與 namespace x:y 無法建立，x 與 xy 之間不重疊。"""
        first = StreamKeys.for_stream('y:z', namespace='x')
        second = StreamKeys.for_stream('z', namespace='xy')

        assert not set(first.all()) & set(second.all())

    @allure.title('識別符含有後綴字串時不互相衝突')
    def test_suffix_in_name(self) -> None:
        """識別符本身含有 :meta 時，與其他串流的 key 不重疊。"""
        plain = StreamKeys.for_stream('a')
        tricky = StreamKeys.for_stream('a:meta')

        assert not set(plain.all()) & set(tricky.all())
