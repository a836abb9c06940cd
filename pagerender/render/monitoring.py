"""
描述: Sentry 监控上报 (参考错误日志回调)
主要功能:
    - 过滤 401 / 403 / 404 等客户端预期状态
    - 缺失错误对象时按状态码构造 HTTPStatusError
    - 附带请求上下文 (method / url / headers) 后上报
    - 上报失败只记日志，始终返回 None
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable

import sentry_sdk
from starlette.responses import Response

from pagerender.config import MonitoringSettings
from pagerender.utils.exceptions import HTTPStatusError


logger = logging.getLogger(__name__)

DEFAULT_SUPPRESSED_STATUS_CODES = frozenset({401, 403, 404})

CaptureFunc = Callable[[BaseException, dict[str, Any]], Any]


def request_context(request: Any) -> dict[str, Any]:
    """尽可能提取请求上下文，缺失的字段直接跳过"""
    context: dict[str, Any] = {}
    method = getattr(request, "method", None)
    if method:
        context["method"] = method
    url = getattr(request, "url", None)
    if url is not None:
        context["url"] = str(url)
    headers = getattr(request, "headers", None)
    if headers is not None:
        context["headers"] = dict(headers)
    return context


def capture_with_sentry(err: BaseException, context: dict[str, Any]) -> Any:
    with sentry_sdk.new_scope() as scope:
        scope.set_context("request", context)
        if "status_code" in context:
            scope.set_tag("http.status_code", str(context["status_code"]))
        return sentry_sdk.capture_exception(err)


class SentryReporter:
    """
    错误日志回调的 Sentry 实现

    以显式对象注入到 ErrorResponder，不依赖任何进程级全局回调
    """

    def __init__(
        self,
        suppressed_status_codes: Iterable[int] = DEFAULT_SUPPRESSED_STATUS_CODES,
        capture: CaptureFunc | None = None,
    ) -> None:
        self._suppressed = frozenset(suppressed_status_codes)
        self._capture = capture or capture_with_sentry

    @property
    def suppressed_status_codes(self) -> frozenset[int]:
        return self._suppressed

    def __call__(
        self,
        response: Response,
        request: Any,
        code: int,
        err: BaseException | None,
    ) -> None:
        if code in self._suppressed:
            return None

        if err is None:
            err = HTTPStatusError(code)

        context = request_context(request)
        context["status_code"] = code
        try:
            self._capture(err, context)
        except Exception as exc:
            logger.warning("Monitoring report failed", extra={"status_code": code, "error": str(exc)})
        return None


def init_monitoring(settings: MonitoringSettings) -> bool:
    """配置了 DSN 时初始化 Sentry，返回监控是否生效"""
    if not settings.dsn:
        if settings.enabled:
            logger.warning("Monitoring enabled without a DSN, events will be dropped")
        return False
    sentry_sdk.init(
        dsn=settings.dsn,
        environment=settings.environment,
        traces_sample_rate=settings.traces_sample_rate,
    )
    logger.info("Sentry monitoring initialized", extra={"environment": settings.environment})
    return True


def reporter_from_settings(settings: MonitoringSettings) -> SentryReporter | None:
    if not (settings.enabled or settings.dsn):
        return None
    return SentryReporter(settings.suppressed_status_codes)
