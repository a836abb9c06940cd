"""
描述: 错误响应器 (Error Responder)
主要功能:
    - 状态码 -> 标准 HTTP 状态文本
    - 调用可插拔的错误日志回调 (监控上报)
    - 输出纯文本错误响应，或按状态码渲染错误页模板
    - 可配置的"致命状态码"策略 (默认为空)
"""

from __future__ import annotations

import logging
import posixpath
from http import HTTPStatus
from typing import TYPE_CHECKING, Any, Callable, Iterable

from starlette.requests import Request
from starlette.responses import HTMLResponse, PlainTextResponse, Response

from pagerender.utils.exceptions import PageRenderError

if TYPE_CHECKING:
    from pagerender.render.compiler import TemplateCompiler


logger = logging.getLogger(__name__)

ErrorCallback = Callable[[Response, Request, int, BaseException | None], BaseException | None]
FatalHandler = Callable[[int, BaseException | None], None]


def status_text(code: int) -> str:
    """未知状态码返回空字符串"""
    try:
        return HTTPStatus(code).phrase
    except ValueError:
        return ""


class ErrorResponder:
    """
    失败 -> HTTP 响应的唯一转换点

    功能:
        - 回调缺失时为 no-op，回调返回值被忽略，回调抛出的异常只记日志
        - 错误页渲染失败时回退为纯文本响应
        - 永不向调用方抛出异常 (fatal_handler 自身的行为除外)
    """

    def __init__(
        self,
        compiler: TemplateCompiler | None = None,
        *,
        error_log_callback: ErrorCallback | None = None,
        error_template_dir: str = "",
        error_templates: dict[int, str] | None = None,
        fatal_status_codes: Iterable[int] = (),
        fatal_handler: FatalHandler | None = None,
    ) -> None:
        self._compiler = compiler
        self._error_log_callback = error_log_callback
        self.error_template_dir = error_template_dir
        self._error_templates: dict[int, str] = dict(error_templates or {})
        self._fatal_status_codes = frozenset(fatal_status_codes)
        self._fatal_handler = fatal_handler

    # region 配置 (仅限启动阶段)
    def set_error_log_callback(self, callback: ErrorCallback | None) -> None:
        self._error_log_callback = callback

    def set_error_template(self, code: int, name: str) -> None:
        self._error_templates[code] = name

    def set_fatal_policy(self, codes: Iterable[int], handler: FatalHandler | None = None) -> None:
        self._fatal_status_codes = frozenset(codes)
        self._fatal_handler = handler

    @property
    def callback(self) -> ErrorCallback | None:
        return self._error_log_callback

    @property
    def fatal_status_codes(self) -> frozenset[int]:
        return self._fatal_status_codes
    # endregion

    def error_log_callback(
        self,
        response: Response,
        request: Request,
        code: int,
        err: BaseException | None,
    ) -> BaseException | None:
        if self._error_log_callback is None:
            return None
        return self._error_log_callback(response, request, code, err)

    def error_template_name(self, code: int) -> str | None:
        name = self._error_templates.get(code)
        if not name:
            return None
        if self.error_template_dir:
            return posixpath.join(self.error_template_dir, name)
        return name

    def serve_error(
        self,
        request: Request,
        code: int,
        err: BaseException | None,
        page_data: Any = None,
    ) -> Response:
        message = status_text(code)
        log = logger.error if code >= 500 else logger.warning
        log(
            "Serving error response",
            extra={
                "status_code": code,
                "error": str(err) if err is not None else "",
                "error_code": err.code if isinstance(err, PageRenderError) else "",
            },
        )

        response = self._render_error_page(code, message, page_data)
        if response is None:
            response = PlainTextResponse(message, status_code=code)
            response.headers["X-Content-Type-Options"] = "nosniff"

        try:
            self.error_log_callback(response, request, code, err)
        except Exception:
            logger.exception("Error log callback failed", extra={"status_code": code})

        if code in self._fatal_status_codes:
            logger.critical("Fatal status code served", extra={"status_code": code})
            if self._fatal_handler is not None:
                self._fatal_handler(code, err)

        return response

    def _render_error_page(self, code: int, message: str, page_data: Any) -> Response | None:
        name = self.error_template_name(code)
        if name is None or self._compiler is None:
            return None
        try:
            template = self._compiler.compile(name)
            body = template.render(status_code=code, status_text=message, page=page_data)
        except Exception as exc:
            logger.warning(
                "Error page render failed, falling back to plain text",
                extra={"status_code": code, "template_name": name, "error": str(exc)},
            )
            return None
        return HTMLResponse(body, status_code=code)
