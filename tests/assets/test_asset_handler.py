from __future__ import annotations

from pathlib import Path

import pytest

from pagerender.assets import AssetHandler, BinDataAssetSource, FSAssetSource
from pagerender.utils.exceptions import AssetError, AssetNotFoundError, NoSourcesError


class _CountingSource:
    def __init__(self, data: dict[str, bytes]) -> None:
        self._data = data
        self.calls: list[str] = []

    def get(self, name: str) -> bytes:
        self.calls.append(name)
        return self._data[name]


def test_first_successful_source_wins() -> None:
    first = _CountingSource({"page.html": b"first"})
    second = _CountingSource({"page.html": b"second"})
    handler = AssetHandler([first, second])

    assert handler.get("page.html") == b"first"
    assert second.calls == []


def test_failing_source_is_skipped() -> None:
    first = _CountingSource({})
    second = _CountingSource({"page.html": b"second"})
    handler = AssetHandler([first, second])

    assert handler.get("page.html") == b"second"
    assert first.calls == ["page.html"]


def test_filesystem_overrides_embedded_in_configured_order(tmp_path: Path) -> None:
    (tmp_path / "page.html").write_bytes(b"from disk")
    embedded = BinDataAssetSource({"page.html": b"embedded", "other.html": b"only embedded"}.__getitem__)
    handler = AssetHandler([FSAssetSource(tmp_path), embedded])

    assert handler.get("page.html") == b"from disk"
    assert handler.get("other.html") == b"only embedded"


def test_no_sources_fails_for_every_name() -> None:
    handler = AssetHandler([])

    for name in ("a.html", "b.html"):
        with pytest.raises(NoSourcesError) as excinfo:
            handler.get(name)
        assert "no sources defined" in str(excinfo.value)
        assert excinfo.value.name == name


def test_all_sources_failing_reports_requested_name(tmp_path: Path) -> None:
    handler = AssetHandler([FSAssetSource(tmp_path), BinDataAssetSource({}.__getitem__)])

    with pytest.raises(AssetNotFoundError) as excinfo:
        handler.get("missing.html")

    assert isinstance(excinfo.value, AssetError)
    assert excinfo.value.message == "Asset not found: missing.html"
    assert excinfo.value.code == "ASSET_NOT_FOUND"
    assert excinfo.value.to_dict()["details"] == {"name": "missing.html"}


def test_sources_are_immutable_after_construction() -> None:
    sources = [_CountingSource({"a": b"1"})]
    handler = AssetHandler(sources)
    sources.clear()

    assert handler.get("a") == b"1"
    assert isinstance(handler.sources, tuple)
