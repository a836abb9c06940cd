"""
异常处理模块

统一定义页面渲染链路的异常分类 (解析 / 编译 / 执行 / HTTP 状态)，
便于 ErrorResponder 精确捕获并转换为 HTTP 响应
"""

from __future__ import annotations

from typing import Any


# ============================================
# region 基础异常
# ============================================
class PageRenderError(Exception):
    """页面渲染基础异常类"""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"
# endregion
# ============================================


# ============================================
# region 资源解析异常 (Resolution)
# ============================================
class AssetError(PageRenderError):
    """资源解析异常"""

    def __init__(
        self,
        message: str,
        name: str,
        code: str = "ASSET_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)
        self.name = name
        self.details["name"] = name


class NoSourcesError(AssetError):
    """未配置任何资源来源"""

    def __init__(self, name: str) -> None:
        super().__init__(
            message=f"no sources defined searching for {name}",
            name=name,
            code="NO_SOURCES",
        )


class AssetNotFoundError(AssetError):
    """所有资源来源均未命中"""

    def __init__(self, name: str) -> None:
        super().__init__(
            message=f"Asset not found: {name}",
            name=name,
            code="ASSET_NOT_FOUND",
        )
# endregion
# ============================================


# ============================================
# region 模板异常 (Compile / Execution)
# ============================================
class TemplateCompileError(PageRenderError):
    """模板源码语法错误"""

    def __init__(self, template_name: str, cause: Exception) -> None:
        super().__init__(
            message=f"template '{template_name}' failed to compile: {cause}",
            code="COMPILE_ERROR",
            details={"template": template_name, "cause": str(cause)},
        )
        self.template_name = template_name
        self.original_exception = cause


class TemplateExecutionError(PageRenderError):
    """模板执行失败 (数据与模板不兼容)"""

    def __init__(self, template_name: str, cause: Exception) -> None:
        super().__init__(
            message=f"template '{template_name}' failed to execute: {cause}",
            code="EXECUTION_ERROR",
            details={"template": template_name, "cause": str(cause)},
        )
        self.template_name = template_name
        self.original_exception = cause
# endregion
# ============================================


# ============================================
# region HTTP 状态异常
# ============================================
class HTTPStatusError(PageRenderError):
    """仅携带状态码的人工构造错误 (用于监控上报)"""

    def __init__(self, status_code: int) -> None:
        super().__init__(
            message=f"HTTP error {status_code}",
            code="HTTP_ERROR",
            details={"status_code": status_code},
        )
        self.status_code = status_code
# endregion
# ============================================
