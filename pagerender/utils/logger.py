"""
描述: 结构化日志工具库
主要功能:
    - JSON 格式结构化输出 (Structured Logging)
    - 自动追踪请求上下文 (Request ID, Template)
    - 模板编译耗时自动记录
"""

from __future__ import annotations

import inspect
import json
import logging
import time
import uuid
from contextvars import ContextVar
from functools import wraps
from typing import Any, Callable

from pagerender.config import LoggingSettings


# region 上下文变量 (Context Vars)
request_id_var: ContextVar[str] = ContextVar("request_id", default="")
template_var: ContextVar[str] = ContextVar("template", default="")
# endregion


_RESERVED_ATTRS = frozenset({
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "taskName", "message", "asctime",
})


# region 日志 Formatter
class StructuredJsonFormatter(logging.Formatter):
    """
    JSON 结构化日志格式化器

    功能:
        - 将日志记录转换为符合 ELK/Loki 标准的 JSON 格式
        - 自动注入当前上下文变量
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if request_id := request_id_var.get():
            payload["request_id"] = request_id
        if template := template_var.get():
            payload["template"] = template

        # extra 字段（通过 logger.info("msg", extra={...}) 传入）
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key.startswith("_"):
                continue
            payload[key] = value

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


class SimpleFormatter(logging.Formatter):
    """简单文本格式化器（开发环境用）"""

    def format(self, record: logging.LogRecord) -> str:
        base = f"[{self.formatTime(record)}] {record.levelname:5} {record.name}: {record.getMessage()}"

        context_parts = []
        if request_id := request_id_var.get():
            context_parts.append(f"req={request_id[:8]}")
        if template := template_var.get():
            context_parts.append(f"template={template}")
        if context_parts:
            base += f" ({', '.join(context_parts)})"

        extras = []
        for key in ("status_code", "error", "duration_ms"):
            if hasattr(record, key):
                extras.append(f"{key}={getattr(record, key)}")
        if extras:
            base += f" [{', '.join(extras)}]"

        return base
# endregion


# region 上下文管理
def set_request_context(
    request_id: str | None = None,
    template: str | None = None,
) -> None:
    """
    设置当前请求的上下文信息

    参数:
        request_id: 请求唯一标识
        template: 当前渲染的模板名称
    """
    if request_id:
        request_id_var.set(request_id)
    if template:
        template_var.set(template)


def clear_request_context() -> None:
    """清除请求上下文"""
    request_id_var.set("")
    template_var.set("")


def generate_request_id() -> str:
    """生成请求 ID"""
    return str(uuid.uuid4())[:12]
# endregion


# region 性能监控
def log_duration(logger_name: str = __name__):
    """
    执行耗时记录装饰器

    参数:
        logger_name: 用于输出日志的 Logger 名称

    效果:
        - 自动计算异步/同步函数的执行耗时
        - 输出包含 duration_ms 的 debug 日志
    """
    def decorator(func: Callable):
        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            logger = logging.getLogger(logger_name)
            start = time.perf_counter()
            try:
                return await func(*args, **kwargs)
            finally:
                duration_ms = (time.perf_counter() - start) * 1000
                logger.debug(
                    f"{func.__name__} finished",
                    extra={"duration_ms": round(duration_ms, 2)},
                )

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            logger = logging.getLogger(logger_name)
            start = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                duration_ms = (time.perf_counter() - start) * 1000
                logger.debug(
                    f"{func.__name__} finished",
                    extra={"duration_ms": round(duration_ms, 2)},
                )

        if inspect.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator
# endregion


# region 初始化配置
def setup_logging(settings: LoggingSettings) -> None:
    """
    初始化全局日志配置

    参数:
        settings: 日志配置对象

    动作:
        - 配置 Root Logger 级别
        - 设置 StreamHandler 及 Formatter (JSON/Text)
        - 调整第三方库日志级别以减少噪音
    """
    level = getattr(logging, settings.level.upper(), logging.INFO)

    handler = logging.StreamHandler()
    if settings.format == "json":
        handler.setFormatter(StructuredJsonFormatter())
    else:
        handler.setFormatter(SimpleFormatter())

    logging.basicConfig(level=level, handlers=[handler], force=True)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sentry_sdk").setLevel(logging.WARNING)
# endregion
