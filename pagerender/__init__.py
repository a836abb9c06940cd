"""
描述: PageRender 服务端页面渲染层
主要功能:
    - 多来源模板资源解析
    - Jinja2 模板编译与渲染
    - 错误 -> HTTP 响应转换与监控上报
"""

from pagerender.assets import AssetHandler, AssetSource, BinDataAssetSource, FSAssetSource
from pagerender.render import AppRenderer, ErrorResponder, SentryReporter

__version__ = "0.2.0"

__all__ = [
    "AppRenderer",
    "AssetHandler",
    "AssetSource",
    "BinDataAssetSource",
    "ErrorResponder",
    "FSAssetSource",
    "SentryReporter",
]
