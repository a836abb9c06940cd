"""
描述: HTTP 接入子包
主要功能:
    - FastAPI 应用工厂与错误处理接线
"""

from pagerender.server.app_factory import create_app, get_renderer

__all__ = ["create_app", "get_renderer"]
