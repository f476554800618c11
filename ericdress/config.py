import json
import logging
import os
import re
from dataclasses import dataclass, field
from typing import Any, Mapping
from urllib.parse import urlparse

from dotenv import load_dotenv

from .core.errors import ConfigurationError
from .core.formatting import DEFAULT_WRAP_PROBABILITY
from .core.models import CATEGORIES, TextSource
from .core.textpool import parse_text_source

load_dotenv()
logger = logging.getLogger(__name__)

VERSION = "1.0.0"

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DEFAULT_CONFIG_PATH = os.path.join(BASE_DIR, "config", "config.json")

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}
LAUNCH_TYPES = ("polling", "webhook")
COMMAND_PATTERN = re.compile(r"^[\da-z_]{1,32}$")


@dataclass(frozen=True)
class WebhookSettings:
    url: str
    listen: str = "0.0.0.0"
    port: int = 8443
    url_path: str = ""
    cert_path: str | None = None
    key_path: str | None = None


@dataclass(frozen=True)
class LoggingSettings:
    level: int = logging.INFO
    logfile: str | None = None


@dataclass(frozen=True)
class Settings:
    token: str
    msgs: Mapping[str, TextSource]
    config_dir: str
    launch_type: str = "polling"
    drop_pending_updates: bool = False
    webhook: WebhookSettings | None = None
    log_config: LoggingSettings = field(default_factory=LoggingSettings)
    block_from_id: frozenset[int] = frozenset()
    ignore_chat_id: frozenset[int] = frozenset()
    command: str = "dress"
    wrap_probability: float = DEFAULT_WRAP_PROBABILITY


# --- SECTION PARSERS ---
def _section(raw: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = raw.get(key) or {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"'{key}' must be an object.")
    return value


def _parse_id_list(raw: Mapping[str, Any], key: str) -> frozenset[int]:
    value = raw.get(key) or []
    if not isinstance(value, list):
        raise ConfigurationError(f"'{key}' must be a list of numeric ids.")
    try:
        return frozenset(int(item) for item in value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"'{key}' must be a list of numeric ids: {e}") from e


def _optional_str(section: Mapping[str, Any], key: str, name: str) -> str | None:
    value = section.get(key)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ConfigurationError(f"'{name}' must be a string.")
    return value


def _parse_bool(section: Mapping[str, Any], key: str, name: str, default: bool = False) -> bool:
    value = section.get(key, default)
    if not isinstance(value, bool):
        raise ConfigurationError(f"'{name}' must be true or false (got {value!r}).")
    return value


def _parse_msgs(raw: Mapping[str, Any]) -> dict[str, TextSource]:
    msgs = _section(raw, "msgs")
    sources: dict[str, TextSource] = {}
    for category in CATEGORIES:
        if category not in msgs:
            raise ConfigurationError(f"msgs.{category}: missing message source.")
        try:
            sources[category] = parse_text_source(msgs[category])
        except ConfigurationError as e:
            raise ConfigurationError(f"msgs.{category}: {e}") from e
    return sources


def _parse_logging(raw: Mapping[str, Any]) -> LoggingSettings:
    section = _section(raw, "logging")
    level_name = str(section.get("level") or "info").lower()
    if level_name not in LOG_LEVELS:
        raise ConfigurationError(f"logging.level must be one of debug, info, warning, error (got '{level_name}').")
    return LoggingSettings(level=LOG_LEVELS[level_name], logfile=_optional_str(section, "logfile", "logging.logfile"))


def validate_webhook_url(url: str) -> str:
    if not isinstance(url, str):
        raise ConfigurationError(f"Can't parse webhook url: {url!r}")
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigurationError(f"Can't parse webhook url: '{url}'")
    return parsed.geturl()


def _parse_webhook(raw: Mapping[str, Any]) -> WebhookSettings:
    section = _section(raw, "webhook")
    url = validate_webhook_url(section.get("url") or "")
    ssl = _section(section, "ssl")
    try:
        port = int(section.get("port") or 8443)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"webhook.port must be a number: {e}") from e
    url_path = _optional_str(section, "hook_path", "webhook.hook_path") or urlparse(url).path
    return WebhookSettings(
        url=url,
        listen=_optional_str(section, "listen", "webhook.listen") or "0.0.0.0",
        port=port,
        url_path=url_path.lstrip("/"),
        cert_path=_optional_str(ssl, "cert_path", "webhook.ssl.cert_path"),
        key_path=_optional_str(ssl, "key_path", "webhook.ssl.key_path"),
    )


# --- LOADING ---
def read_config_file(path: str) -> dict:
    if not os.path.exists(path):
        raise ConfigurationError(f"Config file not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = json.load(handle)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Could not read config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a JSON object.")
    return data


def build_settings(raw: Mapping[str, Any], config_dir: str) -> Settings:
    token = os.getenv("TELEGRAM_BOT_TOKEN") or raw.get("token")
    if not token:
        raise ConfigurationError("TELEGRAM_BOT_TOKEN not set!")

    launch_type = raw.get("launch_type") or "polling"
    if launch_type not in LAUNCH_TYPES:
        raise ConfigurationError(f"launch_type must be 'polling' or 'webhook' (got '{launch_type}').")

    command = str(raw.get("command") or "dress").lstrip("/").lower()
    if not COMMAND_PATTERN.match(command):
        raise ConfigurationError(f"Invalid command name '{command}'.")

    try:
        wrap_probability = float(raw.get("wrap_probability", DEFAULT_WRAP_PROBABILITY))
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"wrap_probability must be a number: {e}") from e
    if not 0.0 <= wrap_probability <= 1.0:
        raise ConfigurationError(f"wrap_probability must be between 0 and 1 (got {wrap_probability}).")

    return Settings(
        token=token,
        msgs=_parse_msgs(raw),
        config_dir=config_dir,
        launch_type=launch_type,
        drop_pending_updates=_parse_bool(_section(raw, "polling"), "drop_pending_updates", "polling.drop_pending_updates"),
        webhook=_parse_webhook(raw) if launch_type == "webhook" else None,
        log_config=_parse_logging(raw),
        block_from_id=_parse_id_list(raw, "block_from_id"),
        ignore_chat_id=_parse_id_list(raw, "ignore_chat_id"),
        command=command,
        wrap_probability=wrap_probability,
    )


def load_settings(path: str | None = None) -> Settings:
    path = os.path.abspath(path or os.getenv("ERICDRESS_CONFIG") or DEFAULT_CONFIG_PATH)
    logger.info(f"Loading config from {path}")
    return build_settings(read_config_file(path), os.path.dirname(path))
