"""
描述: 模板编译器 (Jinja2)
主要功能:
    - 通过 AssetHandler 解析模板源码
    - 按需设置自定义表达式分隔符
    - 注入固定辅助函数与调用方扩展函数
    - 将语法错误归类为 TemplateCompileError
"""

from __future__ import annotations

import logging
from typing import Callable

from jinja2 import BaseLoader, Environment, StrictUndefined, Template, TemplateNotFound, TemplateSyntaxError
from jinja2.loaders import split_template_path

from pagerender.assets.handler import AssetHandler
from pagerender.render.helpers import HelperFuncs, merge_helpers
from pagerender.utils.exceptions import AssetError, TemplateCompileError
from pagerender.utils.logger import log_duration


logger = logging.getLogger(__name__)


class AssetLoader(BaseLoader):
    """让 extends / include 走同一套有序资源来源"""

    def __init__(self, asset_handler: AssetHandler) -> None:
        self._asset_handler = asset_handler

    def get_source(
        self, environment: Environment, template: str
    ) -> tuple[str, str | None, Callable[[], bool] | None]:
        # 含 ".." 的名称直接视为不存在 (TemplateNotFound)
        name = "/".join(split_template_path(template))
        try:
            data = self._asset_handler.get(name)
        except AssetError as exc:
            raise TemplateNotFound(template) from exc
        return data.decode("utf-8"), None, None


class TemplateCompiler:
    """
    模板编译器

    每次调用都新建 Environment，不做任何编译缓存；
    自身状态只在启动阶段通过 set_delimiters 修改
    """

    def __init__(self, asset_handler: AssetHandler, delimiters: tuple[str, str] = ("", "")) -> None:
        self._asset_handler = asset_handler
        self._left, self._right = delimiters

    @property
    def delimiters(self) -> tuple[str, str]:
        return self._left, self._right

    def set_delimiters(self, left: str, right: str) -> None:
        self._left, self._right = left, right

    def environment(self, funcs: HelperFuncs | None = None) -> Environment:
        options: dict[str, str] = {}
        # 任一侧非空即启用，空的一侧保留引擎默认值
        if self._left or self._right:
            if self._left:
                options["variable_start_string"] = self._left
            if self._right:
                options["variable_end_string"] = self._right

        env = Environment(
            loader=AssetLoader(self._asset_handler),
            autoescape=True,
            undefined=StrictUndefined,
            cache_size=0,
            **options,
        )
        helpers = merge_helpers(funcs)
        env.globals.update(helpers)
        env.filters.update(helpers)
        return env

    @log_duration(__name__)
    def compile(self, name: str, funcs: HelperFuncs | None = None) -> Template:
        """
        解析并编译模板

        异常:
            AssetError: 任何来源都找不到 name (原样抛出)
            TemplateCompileError: 源码不是合法的 UTF-8 或存在语法错误
        """
        source = self._asset_handler.get(name)
        env = self.environment(funcs)
        try:
            text = source.decode("utf-8")
            code = env.compile(text, name=name)
        except (TemplateSyntaxError, UnicodeDecodeError) as exc:
            logger.warning("Template compile failed", extra={"template_name": name, "error": str(exc)})
            raise TemplateCompileError(name, exc) from exc
        return env.template_class.from_code(env, code, env.make_globals(None))
