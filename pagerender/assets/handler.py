"""
描述: 多来源资源解析器
主要功能:
    - 按配置顺序依次尝试每个来源
    - 首个成功的来源即返回 (first success wins)
    - 单个来源的失败被丢弃，全部失败时抛出 AssetNotFoundError
"""

from __future__ import annotations

import logging
from typing import Iterable

from pagerender.assets.sources import AssetSource
from pagerender.utils.exceptions import AssetNotFoundError, NoSourcesError


logger = logging.getLogger(__name__)


class AssetHandler:
    """有序来源列表上的资源查找"""

    def __init__(self, sources: Iterable[AssetSource] = ()) -> None:
        self._sources: tuple[AssetSource, ...] = tuple(sources)

    @property
    def sources(self) -> tuple[AssetSource, ...]:
        return self._sources

    def get(self, name: str) -> bytes:
        if not self._sources:
            raise NoSourcesError(name)

        for source in self._sources:
            try:
                return source.get(name)
            except Exception as exc:
                logger.debug(
                    "Asset source miss",
                    extra={"asset": name, "source": repr(source), "error": str(exc)},
                )
                continue

        raise AssetNotFoundError(name)
