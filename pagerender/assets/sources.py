"""
描述: 资源来源 (AssetSource) 实现
主要功能:
    - 定义单方法能力协议 get(name) -> bytes
    - 文件系统来源: 根目录 + 相对名称拼接
    - 嵌入数据来源: 委托给调用方提供的 name -> bytes 函数
"""

from __future__ import annotations

import posixpath
from pathlib import Path
from typing import Callable, Protocol, runtime_checkable


AssetFunc = Callable[[str], bytes]


@runtime_checkable
class AssetSource(Protocol):
    """任何可以按名称返回原始字节的来源"""

    def get(self, name: str) -> bytes:
        ...


class FSAssetSource:
    """文件系统资源来源，读取失败或路径越出根目录时抛出 OSError"""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def get(self, name: str) -> bytes:
        root = self._path.resolve()
        target = (root / posixpath.normpath(name).lstrip("/")).resolve()
        # 解析后仍须位于根目录之内
        if not target.is_relative_to(root):
            raise FileNotFoundError(f"asset path escapes root: {name}")
        return target.read_bytes()

    def __repr__(self) -> str:
        return f"FSAssetSource({str(self._path)!r})"


class BinDataAssetSource:
    """
    嵌入数据资源来源

    asset_func 未命中时应抛出异常 (KeyError / LookupError 等)，
    由 AssetHandler 统一视为未命中
    """

    def __init__(self, asset_func: AssetFunc) -> None:
        self._asset_func = asset_func

    def get(self, name: str) -> bytes:
        return self._asset_func(name)

    def __repr__(self) -> str:
        return f"BinDataAssetSource({self._asset_func!r})"
