"""
描述: 页面渲染器 (Page Renderer)
主要功能:
    - 解析 -> 编译 -> 执行 -> 输出 HTML 响应
    - 执行结果先完整缓冲，失败时不会输出半截页面
    - 任一阶段失败统一交给 ErrorResponder (500)
    - 从 Settings 组装资源来源、分隔符与监控回调
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Iterable

from jinja2 import Template
from starlette.requests import Request
from starlette.responses import HTMLResponse, Response

from pagerender.assets.handler import AssetHandler
from pagerender.assets.sources import AssetFunc, AssetSource, BinDataAssetSource, FSAssetSource
from pagerender.config import Settings
from pagerender.render.compiler import TemplateCompiler
from pagerender.render.helpers import HelperFuncs, merge_helpers
from pagerender.render.monitoring import reporter_from_settings
from pagerender.render.responder import ErrorCallback, ErrorResponder, FatalHandler
from pagerender.utils.exceptions import TemplateExecutionError
from pagerender.utils.logger import template_var


logger = logging.getLogger(__name__)


class AppRenderer:
    """
    应用渲染器

    功能:
        - 进程启动时构造一次，请求处理期间只读
        - set_* 方法仅限启动阶段调用，不与请求并发
    """

    def __init__(
        self,
        asset_handler: AssetHandler,
        *,
        template_dir: str = "",
        error_template_dir: str = "",
        delimiters: tuple[str, str] = ("", ""),
        error_log_callback: ErrorCallback | None = None,
        error_templates: dict[int, str] | None = None,
        fatal_status_codes: Iterable[int] = (),
        fatal_handler: FatalHandler | None = None,
    ) -> None:
        self.template_dir = template_dir
        self.asset_handler = asset_handler
        self._compiler = TemplateCompiler(asset_handler, delimiters)
        self._responder = ErrorResponder(
            self._compiler,
            error_log_callback=error_log_callback,
            error_template_dir=error_template_dir,
            error_templates=error_templates,
            fatal_status_codes=fatal_status_codes,
            fatal_handler=fatal_handler,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        embedded: AssetFunc | None = None,
        fatal_handler: FatalHandler | None = None,
    ) -> "AppRenderer":
        """
        按配置组装渲染器

        来源顺序: 配置的文件系统目录 (依次)，最后是嵌入数据 (若提供)
        """
        sources: list[AssetSource] = [FSAssetSource(root) for root in settings.asset_roots()]
        if embedded is not None:
            sources.append(BinDataAssetSource(embedded))

        templates = settings.templates
        return cls(
            AssetHandler(sources),
            template_dir=templates.template_dir,
            error_template_dir=templates.error_template_dir,
            delimiters=(templates.left_delimiter, templates.right_delimiter),
            error_log_callback=reporter_from_settings(settings.monitoring),
            error_templates=templates.error_templates,
            fatal_status_codes=settings.errors.fatal_status_codes,
            fatal_handler=fatal_handler,
        )

    # region 配置 (仅限启动阶段)
    @property
    def error_template_dir(self) -> str:
        return self._responder.error_template_dir

    @property
    def delimiters(self) -> tuple[str, str]:
        return self._compiler.delimiters

    @property
    def responder(self) -> ErrorResponder:
        return self._responder

    def set_delimiters(self, left: str, right: str) -> None:
        self._compiler.set_delimiters(left, right)

    def set_error_log_callback(self, callback: ErrorCallback | None) -> None:
        self._responder.set_error_log_callback(callback)

    def set_error_template(self, code: int, name: str) -> None:
        self._responder.set_error_template(code, name)
    # endregion

    # region 资源读取
    def get_template_data(self, name: str) -> bytes:
        return self.asset_handler.get(name)

    def get_layout_data(self, name: str) -> bytes:
        return self.asset_handler.get(name)
    # endregion

    def template(self, name: str, funcs: HelperFuncs | None = None) -> Template:
        return self._compiler.compile(name, funcs)

    def serve_page(self, request: Request, name: str, data: Any) -> Response:
        return self.serve_page_with_funcs(request, name, data, {})

    def serve_page_with_funcs(
        self,
        request: Request,
        name: str,
        data: Any,
        funcs: HelperFuncs | None,
    ) -> Response:
        """
        渲染页面

        返回:
            成功时为 text/html 响应，任何失败时为 ErrorResponder 给出的 500 响应
        """
        token = template_var.set(name)
        try:
            try:
                tmpl = self.template(name, funcs)
            except Exception as exc:
                return self.serve_error(request, 500, exc, None)

            try:
                body = tmpl.render(self._page_context(data, funcs))
            except Exception as exc:
                return self.serve_error(request, 500, TemplateExecutionError(name, exc), None)

            logger.debug("Page rendered", extra={"size": len(body)})
            return HTMLResponse(body)
        finally:
            template_var.reset(token)

    @staticmethod
    def _page_context(data: Any, funcs: HelperFuncs | None) -> dict[str, Any]:
        """
        构造模板命名空间

        映射的键直接作为变量，其他值以 data 暴露；辅助函数名不可被数据覆盖
        """
        helpers = merge_helpers(funcs)
        context = dict(data) if isinstance(data, Mapping) else {"data": data}
        shadowed = sorted(key for key in context if key in helpers)
        if shadowed:
            logger.warning("Page data keys shadow helpers, ignored", extra={"keys": shadowed})
        context.update(helpers)
        return context

    def serve_error(
        self,
        request: Request,
        code: int,
        err: BaseException | None,
        page_data: Any = None,
    ) -> Response:
        return self._responder.serve_error(request, code, err, page_data)

    def error_log_callback(
        self,
        response: Response,
        request: Request,
        code: int,
        err: BaseException | None,
    ) -> BaseException | None:
        return self._responder.error_log_callback(response, request, code, err)
