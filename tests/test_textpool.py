from __future__ import annotations

import json
import logging

import pytest

from ericdress.core.errors import ConfigurationError, ParseError, TextPoolNotFoundError
from ericdress.core.models import FileSource, ListSource, LiteralSource
from ericdress.core.textpool import load_content_pools, parse_text_source, produce_content_pool


def _write(path, content: str) -> str:
    path.write_text(content, encoding="utf-8")
    return str(path)


def test_literal_source_becomes_single_element_pool() -> None:
    assert produce_content_pool(LiteralSource("hello")) == ["hello"]


def test_list_source_is_returned_unchanged() -> None:
    items = ["a", "b", " c "]
    assert produce_content_pool(ListSource(items)) is items


def test_text_file_is_split_trimmed_and_filtered(tmp_path) -> None:
    path = _write(tmp_path / "content.txt", "a, b ,,c")
    assert produce_content_pool(FileSource(path)) == ["a", "b", "c"]


def test_text_file_keeps_newlines_inside_entries(tmp_path) -> None:
    path = _write(tmp_path / "content.txt", "first\nline,\n\nsecond\n")
    assert produce_content_pool(FileSource(path)) == ["first\nline", "second"]


def test_json_file_is_parsed_as_array(tmp_path) -> None:
    path = _write(tmp_path / "content.json", json.dumps(["x", "y"]))
    assert produce_content_pool(FileSource(path, parsemode="json")) == ["x", "y"]


@pytest.mark.parametrize("content", ["[\"x\",", "{\"a\": 1}", "[1, 2]"])
def test_malformed_json_file_raises_parse_error(tmp_path, content: str) -> None:
    path = _write(tmp_path / "content.json", content)
    with pytest.raises(ParseError):
        produce_content_pool(FileSource(path, parsemode="json"))


def test_non_utf8_file_raises_parse_error(tmp_path) -> None:
    path = tmp_path / "content.txt"
    path.write_bytes(b"\xff\xfe\xfa")
    with pytest.raises(ParseError):
        produce_content_pool(FileSource(str(path)))


def test_missing_file_raises_file_not_found(tmp_path) -> None:
    with pytest.raises(TextPoolNotFoundError) as excinfo:
        produce_content_pool(FileSource("nope.txt"), base_dir=str(tmp_path))
    assert isinstance(excinfo.value, FileNotFoundError)


def test_relative_path_falls_back_to_base_dir(tmp_path, monkeypatch) -> None:
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    _write(config_dir / "content.txt", "from, base")
    elsewhere = tmp_path / "elsewhere"
    elsewhere.mkdir()
    monkeypatch.chdir(elsewhere)

    assert produce_content_pool(FileSource("content.txt"), base_dir=str(config_dir)) == ["from", "base"]


def test_working_directory_wins_over_base_dir(tmp_path, monkeypatch) -> None:
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    _write(config_dir / "content.txt", "base")
    _write(tmp_path / "content.txt", "cwd")
    monkeypatch.chdir(tmp_path)

    assert produce_content_pool(FileSource("content.txt"), base_dir=str(config_dir)) == ["cwd"]


def test_parse_text_source_shapes() -> None:
    assert parse_text_source("hi") == LiteralSource("hi")
    assert parse_text_source(["a", "b"]) == ListSource(["a", "b"])
    assert parse_text_source({"path": "a.txt"}) == FileSource("a.txt", "text")
    assert parse_text_source({"path": "a.txt", "parsemode": "txt"}) == FileSource("a.txt", "text")
    assert parse_text_source({"path": "a.json", "parsemode": "json"}) == FileSource("a.json", "json")


@pytest.mark.parametrize(
    "raw",
    [42, None, ["a", 1], {"parsemode": "json"}, {"path": ""}, {"path": "a.txt", "parsemode": "yaml"}],
)
def test_parse_text_source_rejects_bad_shapes(raw) -> None:
    with pytest.raises(ConfigurationError):
        parse_text_source(raw)


def _msgs(**overrides):
    msgs = {
        "title": LiteralSource("title"),
        "thumb_url": ListSource(["https://example.org/a.jpg", "https://example.org/b.jpg"]),
        "content": LiteralSource("hello {NAME}"),
        "wrap": LiteralSource("**{TEXT}**"),
        "error": LiteralSource("oops"),
    }
    msgs.update(overrides)
    return msgs


def test_load_content_pools_builds_immutable_pools(caplog) -> None:
    with caplog.at_level(logging.INFO):
        pools = load_content_pools(_msgs())

    assert pools.titles == ("title",)
    assert pools.thumb_urls == ("https://example.org/a.jpg", "https://example.org/b.jpg")
    assert pools.contents == ("hello {NAME}",)
    assert pools.wraps == ("**{TEXT}**",)
    assert pools.errors == ("oops",)
    assert "Loaded 2 message(s) for 'thumb_url'" in caplog.text


def test_load_content_pools_names_category_and_path(tmp_path) -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        load_content_pools(_msgs(content=FileSource("missing.txt")), base_dir=str(tmp_path))

    assert isinstance(excinfo.value, TextPoolNotFoundError)
    assert "msgs.content" in str(excinfo.value)
    assert "missing.txt" in str(excinfo.value)


def test_load_content_pools_rejects_empty_pool(tmp_path) -> None:
    path = _write(tmp_path / "wrap.txt", " , ,\n")
    with pytest.raises(ConfigurationError, match="msgs.wrap"):
        load_content_pools(_msgs(wrap=FileSource(path)))


def test_load_content_pools_rejects_missing_category() -> None:
    msgs = _msgs()
    del msgs["error"]
    with pytest.raises(ConfigurationError, match="msgs.error"):
        load_content_pools(msgs)
