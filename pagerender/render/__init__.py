"""
描述: 模板渲染子包
主要功能:
    - TemplateCompiler: Jinja2 编译与辅助函数注入
    - AppRenderer: 页面渲染编排
    - ErrorResponder: 失败 -> HTTP 响应
    - SentryReporter: 参考监控回调
"""

from pagerender.render.compiler import AssetLoader, TemplateCompiler
from pagerender.render.helpers import base_helpers, safe_html, sha_file, strings_join
from pagerender.render.monitoring import SentryReporter, init_monitoring
from pagerender.render.renderer import AppRenderer
from pagerender.render.responder import ErrorCallback, ErrorResponder, status_text

__all__ = [
    "AppRenderer",
    "AssetLoader",
    "ErrorCallback",
    "ErrorResponder",
    "SentryReporter",
    "TemplateCompiler",
    "base_helpers",
    "init_monitoring",
    "safe_html",
    "sha_file",
    "status_text",
    "strings_join",
]
