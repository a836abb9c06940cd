"""
描述: 模板内置辅助函数
主要功能:
    - safeHTML: 标记可信 HTML 片段，跳过自动转义
    - StringsJoin: 字符串列表拼接
    - SHAFile: 为静态文件名追加内容哈希 (缓存失效)
"""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Any, Callable, Iterable

from markupsafe import Markup


HelperFuncs = dict[str, Callable[..., Any]]


def safe_html(value: str) -> Markup:
    """仅用于可信内容：返回值不会再被转义"""
    return Markup(value)


def strings_join(items: Iterable[str], sep: str) -> str:
    return sep.join(str(item) for item in items)


def sha_file(output_filename: str, fs_filename: str) -> str:
    """读取失败时回退为原文件名 (文件可能尚未生成)"""
    try:
        content = Path(fs_filename).read_bytes()
    except OSError:
        return output_filename
    return f"{output_filename}?{hashlib.sha256(content).hexdigest()}"


def base_helpers() -> HelperFuncs:
    """固定辅助函数集合，合并时始终覆盖调用方同名函数"""
    return {
        "StringsJoin": strings_join,
        "SHAFile": sha_file,
        "safeHTML": safe_html,
    }


def merge_helpers(extra: HelperFuncs | None = None) -> HelperFuncs:
    return {**(extra or {}), **base_helpers()}
