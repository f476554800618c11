import json
import logging
import os
from typing import Any, Mapping, Sequence

from .errors import ConfigurationError, ParseError, TextPoolNotFoundError
from .models import CATEGORIES, ContentPools, FileSource, ListSource, LiteralSource, TextSource

logger = logging.getLogger(__name__)

PARSE_MODES = {"text": "text", "txt": "text", "json": "json"}


# --- SOURCE VALIDATION ---
def parse_text_source(raw: Any) -> TextSource:
    if isinstance(raw, str):
        return LiteralSource(raw)

    if isinstance(raw, list):
        if not all(isinstance(item, str) for item in raw):
            raise ConfigurationError("A message list may only contain strings.")
        return ListSource(raw)

    if isinstance(raw, Mapping):
        path = raw.get("path")
        if not isinstance(path, str) or not path.strip():
            raise ConfigurationError("A message file reference needs a non-empty 'path'.")
        mode = raw.get("parsemode") or "text"
        if mode not in PARSE_MODES:
            raise ConfigurationError(f"Unknown parsemode '{mode}' for '{path}', expected 'text' or 'json'.")
        return FileSource(path=path, parsemode=PARSE_MODES[mode])

    raise ConfigurationError(f"Unsupported message source of type {type(raw).__name__}.")


# --- FILE READING ---
def resolve_path(path: str, base_dir: str | None = None) -> str:
    if os.path.isfile(path):
        return os.path.abspath(path)

    if base_dir and not os.path.isabs(path):
        candidate = os.path.join(base_dir, path)
        if os.path.isfile(candidate):
            return os.path.abspath(candidate)

    raise TextPoolNotFoundError(f"Message file not found: '{path}' (base directory: {base_dir or 'none'})")


def _read_utf8(path: str) -> str:
    try:
        with open(path, "r", encoding="utf-8") as handle:
            return handle.read()
    except UnicodeDecodeError as e:
        raise ParseError(f"'{path}' is not valid UTF-8: {e}") from e


def _parse_json_pool(content: str, path: str) -> list[str]:
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ParseError(f"'{path}' is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise ParseError(f"'{path}' must contain a JSON array, got {type(data).__name__}.")
    if not all(isinstance(item, str) for item in data):
        raise ParseError(f"'{path}' must contain an array of strings.")
    return data


def _parse_text_pool(content: str) -> list[str]:
    return [piece.strip() for piece in content.split(",") if piece.strip()]


def produce_content_pool(source: TextSource, base_dir: str | None = None) -> Sequence[str]:
    if isinstance(source, LiteralSource):
        return [source.text]

    if isinstance(source, ListSource):
        return source.items

    if isinstance(source, FileSource):
        path = resolve_path(source.path, base_dir)
        content = _read_utf8(path)
        if source.parsemode == "json":
            return _parse_json_pool(content, path)
        return _parse_text_pool(content)

    raise ConfigurationError(f"Unsupported message source: {source!r}")


# --- STARTUP LOADING ---
def _describe(source: TextSource) -> str:
    if isinstance(source, FileSource):
        return f"file '{source.path}' ({source.parsemode})"
    if isinstance(source, ListSource):
        return "inline list"
    return "inline string"


def load_content_pools(
    msgs: Mapping[str, TextSource], base_dir: str | None = None, log: logging.Logger | None = None
) -> ContentPools:
    """Load every message category once, failing fast on the first bad one.

    Errors are re-raised as ConfigurationError naming the ``msgs.<category>``
    key and the offending file.
    """
    log = log or logger
    pools: dict[str, tuple[str, ...]] = {}

    for category in CATEGORIES:
        if category not in msgs:
            raise ConfigurationError(f"msgs.{category}: missing message source.")

        source = msgs[category]
        try:
            pool = produce_content_pool(source, base_dir)
        except ConfigurationError as e:
            raise type(e)(f"msgs.{category}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"msgs.{category}: cannot read {_describe(source)}: {e}") from e

        if not pool:
            raise ConfigurationError(f"msgs.{category}: {_describe(source)} produced no messages.")

        pools[category] = tuple(pool)
        log.info(f"Loaded {len(pool)} message(s) for '{category}' from {_describe(source)}.")

    return ContentPools(
        titles=pools["title"],
        thumb_urls=pools["thumb_url"],
        contents=pools["content"],
        wraps=pools["wrap"],
        errors=pools["error"],
    )
