"""Shared configuration contracts and validation helpers for tweetie."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
import os
from pathlib import Path
import tomllib
from typing import Any

from platformdirs import user_config_dir, user_data_dir

from .account import DEFAULT_TOKEN_ENV
from .api import DEFAULT_BASE_URL, DEFAULT_PAGE_SIZE, DEFAULT_TIMEOUT_SECONDS
from .errors import ConfigError
from .models import ListIdentifier

APP_NAME = "tweetie"
CONFIG_ENV = "TWEETIE_CONFIG"
DEFAULT_CONFIG_FILENAME = "config.toml"
DEFAULT_STORE_FILENAME = "tweets.db"
DEFAULT_INTERVAL_SECONDS = 30

DEFAULT_CONFIG_TEMPLATE = f"""[app]
debug = false
# default_list = "owner/slug"

[store]
# path = "~/tweets.db"
# retention_days = 30

[fetcher]
interval_seconds = {DEFAULT_INTERVAL_SECONDS}
count = {DEFAULT_PAGE_SIZE}

[api]
base_url = "{DEFAULT_BASE_URL}"
token_env = "{DEFAULT_TOKEN_ENV}"
timeout_seconds = {DEFAULT_TIMEOUT_SECONDS}
"""


def default_store_path() -> Path:
    return Path(user_data_dir(APP_NAME, appauthor=False)) / DEFAULT_STORE_FILENAME


@dataclass(frozen=True)
class AppConfig:
    debug: bool = False
    default_list: ListIdentifier | None = None


@dataclass(frozen=True)
class StoreConfig:
    path: Path = field(default_factory=default_store_path)
    retention_days: int | None = None


@dataclass(frozen=True)
class FetcherConfig:
    interval_seconds: int = DEFAULT_INTERVAL_SECONDS
    count: int = DEFAULT_PAGE_SIZE


@dataclass(frozen=True)
class ApiConfig:
    base_url: str = DEFAULT_BASE_URL
    token_env: str = DEFAULT_TOKEN_ENV
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS


@dataclass(frozen=True)
class RuntimeConfig:
    app: AppConfig = field(default_factory=AppConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    fetcher: FetcherConfig = field(default_factory=FetcherConfig)
    api: ApiConfig = field(default_factory=ApiConfig)


def default_config() -> RuntimeConfig:
    return RuntimeConfig()


def default_config_toml() -> str:
    return DEFAULT_CONFIG_TEMPLATE


def resolve_config_path(config_path: str | Path | None = None) -> Path:
    if config_path:
        return Path(config_path).expanduser()

    env_value = os.getenv(CONFIG_ENV)
    if env_value:
        return Path(env_value).expanduser()

    config_dir = Path(user_config_dir(APP_NAME, appauthor=False))
    return config_dir / DEFAULT_CONFIG_FILENAME


def init_default_config(config_path: str | Path | None = None, force: bool = False) -> Path:
    path = resolve_config_path(config_path)
    if path.is_dir():
        raise ConfigError(
            f"{path} is a directory; point --path at a file such as {path / DEFAULT_CONFIG_FILENAME}."
        )
    if path.exists() and not force:
        raise ConfigError(f"{path} already exists; pass --force to replace it.")

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(default_config_toml(), encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot write {path}: {exc}. Choose a writable location with --path.") from exc
    return path


def load_runtime_config(config_path: str | Path | None = None) -> RuntimeConfig:
    path = resolve_config_path(config_path)
    if not path.exists():
        raise ConfigError(
            f"Config file not found at '{path}'. Run `tweetie config init --path \"{path}\"` to generate defaults."
        )
    if path.is_dir():
        raise ConfigError(f"{path} is a directory, not a config file.")

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read {path}: {exc}.") from exc
    return _parse_runtime_config(_load_toml(text, path))


def config_to_dict(config: RuntimeConfig) -> dict[str, Any]:
    payload = asdict(config)
    payload["app"]["default_list"] = str(config.app.default_list) if config.app.default_list else None
    payload["store"]["path"] = str(config.store.path)
    return payload


def _load_toml(text: str, path: Path) -> dict[str, Any]:
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"Config file {path} has invalid TOML ({exc}). "
            "Fix it or regenerate defaults with `tweetie config init --force`."
        ) from exc


def _parse_runtime_config(data: dict[str, Any]) -> RuntimeConfig:
    app_raw = _expect_table(data, "app")
    store_raw = _expect_table(data, "store")
    fetcher_raw = _expect_table(data, "fetcher")
    api_raw = _expect_table(data, "api")

    default_list: ListIdentifier | None = None
    if "default_list" in app_raw:
        raw_list = _expect_non_empty_string(app_raw, "app.default_list", default=None)
        try:
            default_list = ListIdentifier.parse(raw_list)
        except ValueError as exc:
            raise ConfigError(f"Invalid value for 'app.default_list': {exc}") from exc

    app_config = AppConfig(
        debug=_expect_bool(app_raw, "app.debug", default=False),
        default_list=default_list,
    )

    store_path = default_store_path()
    if "path" in store_raw:
        store_path = Path(_expect_non_empty_string(store_raw, "store.path", default=None)).expanduser()
    retention_days: int | None = None
    if "retention_days" in store_raw:
        retention_days = _expect_positive_int(store_raw, "store.retention_days", default=1)
    store_config = StoreConfig(path=store_path, retention_days=retention_days)

    fetcher_config = FetcherConfig(
        interval_seconds=_expect_positive_int(
            fetcher_raw, "fetcher.interval_seconds", default=DEFAULT_INTERVAL_SECONDS
        ),
        count=_expect_positive_int(fetcher_raw, "fetcher.count", default=DEFAULT_PAGE_SIZE),
    )

    api_config = ApiConfig(
        base_url=_expect_http_url(api_raw, "api.base_url", default=DEFAULT_BASE_URL),
        token_env=_expect_non_empty_string(api_raw, "api.token_env", default=DEFAULT_TOKEN_ENV),
        timeout_seconds=_expect_positive_number(
            api_raw, "api.timeout_seconds", default=DEFAULT_TIMEOUT_SECONDS
        ),
    )

    return RuntimeConfig(app=app_config, store=store_config, fetcher=fetcher_config, api=api_config)


def _expect_table(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key, {})
    if not isinstance(value, dict):
        raise ConfigError(f"Invalid [{key}] table: expected table, got {type(value).__name__}.")
    return value


def _expect_non_empty_string(
    data: dict[str, Any], key: str, default: str | None
) -> str:
    field_name = key.split(".")[-1]
    if field_name in data:
        value = data[field_name]
    else:
        if default is None:
            raise ConfigError(f"Missing required value '{key}'.")
        value = default

    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"Invalid value for '{key}': expected non-empty string.")
    return value


def _expect_positive_int(data: dict[str, Any], key: str, default: int) -> int:
    value = data.get(key.split(".")[-1], default)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"Invalid value for '{key}': expected positive integer.")
    return value


def _expect_positive_number(data: dict[str, Any], key: str, default: float) -> float:
    value = data.get(key.split(".")[-1], default)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError(f"Invalid value for '{key}': expected positive number.")
    return float(value)


def _expect_bool(data: dict[str, Any], key: str, default: bool) -> bool:
    value = data.get(key.split(".")[-1], default)
    if not isinstance(value, bool):
        raise ConfigError(f"Invalid value for '{key}': expected boolean true/false.")
    return value


def _expect_http_url(data: dict[str, Any], key: str, default: str) -> str:
    value = _expect_non_empty_string(data, key, default)
    if not value.startswith(("http://", "https://")):
        raise ConfigError(f"Invalid value for '{key}': expected an http(s) URL.")
    return value
