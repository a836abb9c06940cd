from __future__ import annotations

import hashlib
from pathlib import Path

from markupsafe import Markup

from pagerender.render.helpers import base_helpers, merge_helpers, safe_html, sha_file, strings_join


def test_safe_html_marks_markup() -> None:
    value = safe_html("<b>x</b>")
    assert isinstance(value, Markup)
    assert str(value) == "<b>x</b>"


def test_strings_join() -> None:
    assert strings_join(["a", "b", "c"], ", ") == "a, b, c"
    assert strings_join([], "-") == ""


def test_sha_file_appends_content_hash(tmp_path: Path) -> None:
    css = tmp_path / "site.css"
    css.write_bytes(b"body{}")

    expected = hashlib.sha256(b"body{}").hexdigest()
    assert sha_file("/static/site.css", str(css)) == f"/static/site.css?{expected}"


def test_sha_file_falls_back_to_filename(tmp_path: Path) -> None:
    assert sha_file("/static/app.js", str(tmp_path / "missing.js")) == "/static/app.js"


def test_merge_helpers_keeps_fixed_set_on_conflict() -> None:
    merged = merge_helpers({"safeHTML": str, "StringsJoin": str, "extra": len})
    assert merged["safeHTML"] is safe_html
    assert merged["StringsJoin"] is strings_join
    assert merged["extra"] is len
    assert set(base_helpers()) == {"safeHTML", "StringsJoin", "SHAFile"}
