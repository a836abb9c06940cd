from __future__ import annotations

from pathlib import Path

import pytest
from jinja2 import TemplateNotFound
from markupsafe import Markup

from pagerender.assets import AssetHandler, BinDataAssetSource, FSAssetSource
from pagerender.render.compiler import TemplateCompiler
from pagerender.utils.exceptions import AssetNotFoundError, TemplateCompileError


def _compiler(templates: dict[str, bytes], delimiters: tuple[str, str] = ("", "")) -> TemplateCompiler:
    return TemplateCompiler(AssetHandler([BinDataAssetSource(templates.__getitem__)]), delimiters)


def test_default_delimiters_render_expression() -> None:
    template = _compiler({"hello.html": b"Hello {{ name }}!"}).compile("hello.html")
    assert template.render(name="World") == "Hello World!"
    assert template.name == "hello.html"


def test_custom_delimiters_parse_body_that_defaults_reject() -> None:
    body = b"<< title >> {{ unclosed"
    custom = _compiler({"page.html": body}, ("<<", ">>"))
    default = _compiler({"page.html": body})

    assert custom.compile("page.html").render(title="Hi") == "Hi {{ unclosed"
    with pytest.raises(TemplateCompileError) as excinfo:
        default.compile("page.html")
    assert excinfo.value.template_name == "page.html"
    assert excinfo.value.code == "COMPILE_ERROR"


def test_one_sided_delimiter_override_keeps_other_default() -> None:
    compiler = _compiler({"page.html": b"[[ name }}"}, ("[[", ""))
    assert compiler.compile("page.html").render(name="x") == "x"


def test_set_delimiters_applies_to_later_compiles() -> None:
    compiler = _compiler({"page.html": b"<% name %>"})
    assert compiler.compile("page.html").render(name="x") == "<% name %>"

    compiler.set_delimiters("<%", "%>")
    assert compiler.delimiters == ("<%", "%>")
    assert compiler.compile("page.html").render(name="x") == "x"


def test_safe_html_bypasses_escaping_while_other_values_escape() -> None:
    compiler = _compiler({"page.html": b"{{ safeHTML(html) }}|{{ text }}|{{ html | safeHTML }}"})
    output = compiler.compile("page.html").render(html="<b>x</b>", text="a<b")
    assert output == "<b>x</b>|a&lt;b|<b>x</b>"


def test_fixed_helpers_win_over_caller_helpers() -> None:
    compiler = _compiler({"page.html": b"{{ safeHTML(html) }} {{ shout(word) }}"})
    funcs = {"safeHTML": lambda value: "overridden", "shout": str.upper}

    output = compiler.compile("page.html", funcs).render(html="<i>i</i>", word="hey")
    assert output == "<i>i</i> HEY"
    assert "shout" not in compiler.environment().globals


def test_environment_helpers_are_registered_as_globals_and_filters() -> None:
    env = _compiler({}).environment()
    for name in ("safeHTML", "StringsJoin", "SHAFile"):
        assert name in env.globals
        assert name in env.filters
    assert isinstance(env.globals["safeHTML"]("<p>"), Markup)


def test_missing_template_propagates_resolution_error() -> None:
    with pytest.raises(AssetNotFoundError):
        _compiler({}).compile("missing.html")


def test_syntax_error_is_compile_error() -> None:
    with pytest.raises(TemplateCompileError) as excinfo:
        _compiler({"bad.html": b"{% if %}"}).compile("bad.html")
    assert "bad.html" in excinfo.value.message


def test_non_utf8_source_is_compile_error() -> None:
    with pytest.raises(TemplateCompileError):
        _compiler({"bin.html": b"\xff\xfe{{ x }}"}).compile("bin.html")


def test_layouts_resolve_through_asset_sources() -> None:
    compiler = _compiler(
        {
            "layout.html": b"<main>{% block content %}{% endblock %}</main>",
            "page.html": b'{% extends "layout.html" %}{% block content %}{{ body }}{% endblock %}',
        }
    )
    assert compiler.compile("page.html").render(body="<x>") == "<main>&lt;x&gt;</main>"


def test_missing_include_surfaces_at_render_time() -> None:
    template = _compiler({"page.html": b'{% include "nope.html" %}'}).compile("page.html")
    with pytest.raises(TemplateNotFound):
        template.render()


def test_compilation_is_deterministic() -> None:
    compiler = _compiler({"page.html": b"{% for i in items %}{{ i }},{% endfor %}"})
    first = compiler.compile("page.html").render(items=[1, 2])
    second = compiler.compile("page.html").render(items=[1, 2])
    assert first == second == "1,2,"


def test_include_with_parent_segment_is_not_found(tmp_path: Path) -> None:
    root = tmp_path / "templates"
    root.mkdir()
    (root / "page.html").write_text('{% include "../secret.txt" %}', encoding="utf-8")
    (tmp_path / "secret.txt").write_text("TOP-SECRET", encoding="utf-8")

    template = TemplateCompiler(AssetHandler([FSAssetSource(root)])).compile("page.html")
    with pytest.raises(TemplateNotFound):
        template.render()


def test_custom_delimiters_keep_statement_markers() -> None:
    compiler = _compiler(
        {
            "loop.html": b"{% for i in items %}<< i >>{% endfor %}",
            "literal.html": b"<< title >> {% not a tag",
        },
        ("<<", ">>"),
    )

    assert compiler.compile("loop.html").render(items=[1, 2]) == "12"
    with pytest.raises(TemplateCompileError):
        compiler.compile("literal.html")
