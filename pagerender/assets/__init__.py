"""
描述: 资源解析子包
主要功能:
    - AssetSource 协议与两种参考实现
    - AssetHandler 有序多来源查找
"""

from pagerender.assets.handler import AssetHandler
from pagerender.assets.sources import AssetSource, BinDataAssetSource, FSAssetSource

__all__ = [
    "AssetHandler",
    "AssetSource",
    "BinDataAssetSource",
    "FSAssetSource",
]
