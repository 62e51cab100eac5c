"""串流 key 配置。

namespace 不可含有冒號，因此帶 namespace 的 key 以第一個冒號切分即可還原 namespace，
不同 namespace 之間不會重疊。未設定 namespace 的串流與帶 namespace 的串流
共用同一個 keyspace（例如識別符 ``a:b`` 與 namespace ``a`` 下的 ``b``），
兩者不應放在同一個資料庫。
"""

from __future__ import annotations

from dataclasses import dataclass

# Redis key 模板
_CHUNKS_TEMPLATE = '{key}:stream'
_ROOT_TEMPLATE = '{key}:root'
_META_TEMPLATE = '{key}:meta'


def check_namespace(namespace: str) -> str:
    """檢查 namespace 格式。

    Raises:
        ValueError: namespace 含有冒號
    """
    if ':' in namespace:
        raise ValueError(f'namespace 不可含有冒號: {namespace!r}')
    return namespace


@dataclass(frozen=True)
class StreamKeys:
    """單一串流在 Redis 中對應的三個 key。

    Attributes:
        name: 呼叫端提供的串流識別符
        chunks: 區塊列表（Redis list）
        root: 建立記錄，存在與否即為串流是否存在
        meta: 使用者自訂的 metadata 記錄
    """

    name: str
    chunks: str
    root: str
    meta: str

    @classmethod
    def for_stream(cls, name: str, namespace: str = '') -> StreamKeys:
        """依串流識別符產生 key。

        Args:
            name: 串流識別符
            namespace: key 前綴，空字串表示不加前綴

        Returns:
            該串流的 key 組合

        Raises:
            ValueError: namespace 含有冒號
        """
        check_namespace(namespace)
        base = f'{namespace}:{name}' if namespace else name
        return cls(
            name=name,
            chunks=_CHUNKS_TEMPLATE.format(key=base),
            root=_ROOT_TEMPLATE.format(key=base),
            meta=_META_TEMPLATE.format(key=base),
        )

    def all(self) -> tuple[str, str, str]:
        """回傳三個 key，順序為 chunks、root、meta。"""
        return (self.chunks, self.root, self.meta)
