"""
资源管理：节点和Pipeline携带的二进制资源（模型、标定表、LUT等）
"""

from pathlib import Path
from typing import Dict, List, Optional, Union


class Asset:
    """单个资源"""

    def __init__(self, key: str, data: bytes):
        self.key = key
        self.data = bytes(data)

    @property
    def size(self) -> int:
        return len(self.data)

    def __repr__(self) -> str:
        return f"Asset(key={self.key}, size={self.size})"


class AssetManager:
    """资源管理器，资源以root_path + key存放"""

    def __init__(self, root_path: str = ""):
        """
        初始化资源管理器

        Args:
            root_path: 资源键前缀，节点资源为"/node/<id>/"
        """
        self.root_path = root_path
        self._assets: Dict[str, Asset] = {}

    def _full_key(self, key: str) -> str:
        if key.startswith("/"):
            return key
        return self.root_path + key

    def set(self, key: str, data: Union[bytes, bytearray, str, Path]) -> Asset:
        """
        添加或替换资源

        Args:
            key: 资源键（相对root_path）
            data: 资源内容，或要读取的本地文件路径

        Returns:
            保存的资源
        """
        if isinstance(data, (str, Path)):
            data = Path(data).read_bytes()
        asset = Asset(self._full_key(key), data)
        self._assets[asset.key] = asset
        return asset

    def get(self, key: str) -> Optional[Asset]:
        """获取资源，不存在时返回None"""
        return self._assets.get(self._full_key(key))

    def remove(self, key: str) -> bool:
        """移除资源"""
        return self._assets.pop(self._full_key(key), None) is not None

    def get_all(self) -> List[Asset]:
        return list(self._assets.values())

    def size(self) -> int:
        return len(self._assets)

    def __contains__(self, key: str) -> bool:
        return self._full_key(key) in self._assets

    def __repr__(self) -> str:
        return f"AssetManager(root={self.root_path!r}, assets={len(self._assets)})"
