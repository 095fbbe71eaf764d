"""Config init/show defaults and validation behavior."""

from __future__ import annotations

from pathlib import Path

import pytest

from tweetie.config import (
    DEFAULT_INTERVAL_SECONDS,
    config_to_dict,
    default_config,
    default_config_toml,
    init_default_config,
    load_runtime_config,
    resolve_config_path,
)
from tweetie.errors import ConfigError
from tweetie.models import ListIdentifier


def test_resolve_config_path_uses_explicit_path() -> None:
    path = resolve_config_path("~/tmp/tweetie-test.toml")
    assert str(path).endswith("tweetie-test.toml")
    assert "~" not in str(path)


def test_resolve_config_path_uses_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    env_path = tmp_path / "env-config.toml"
    monkeypatch.setenv("TWEETIE_CONFIG", str(env_path))
    assert resolve_config_path() == env_path


def test_init_default_config_writes_loadable_template(tmp_path: Path) -> None:
    config_path = tmp_path / "nested" / "config.toml"
    written = init_default_config(config_path)
    assert written == config_path
    assert default_config_toml().strip() in config_path.read_text(encoding="utf-8")

    config = load_runtime_config(config_path)
    assert config.fetcher.interval_seconds == DEFAULT_INTERVAL_SECONDS
    assert config.app.default_list is None
    assert config.store.retention_days is None
    assert config.api == default_config().api


def test_init_default_config_requires_force_for_overwrite(tmp_path: Path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text("existing", encoding="utf-8")
    with pytest.raises(ConfigError, match="--force"):
        init_default_config(config_path)

    init_default_config(config_path, force=True)
    assert "[fetcher]" in config_path.read_text(encoding="utf-8")


def test_init_default_config_rejects_directory(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="is a directory"):
        init_default_config(tmp_path)


def test_load_runtime_config_reports_missing_file(tmp_path: Path) -> None:
    missing = tmp_path / "missing.toml"
    with pytest.raises(ConfigError, match="Run `tweetie config init"):
        load_runtime_config(missing)


def test_load_runtime_config_reports_invalid_toml(tmp_path: Path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text("[app\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid TOML"):
        load_runtime_config(config_path)


def test_load_runtime_config_reads_all_sections(tmp_path: Path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text(
        """[app]
debug = true
default_list = "@owner/news"

[store]
path = "~/tweetie/tweets.db"
retention_days = 7

[fetcher]
interval_seconds = 5
count = 20

[api]
base_url = "https://example.test/1.1"
token_env = "MY_TOKEN"
timeout_seconds = 2
""",
        encoding="utf-8",
    )
    config = load_runtime_config(config_path)

    assert config.app.debug is True
    assert config.app.default_list == ListIdentifier(username="owner", slug="news")
    assert config.store.path == Path("~/tweetie/tweets.db").expanduser()
    assert config.store.retention_days == 7
    assert config.fetcher.interval_seconds == 5
    assert config.fetcher.count == 20
    assert config.api.base_url == "https://example.test/1.1"
    assert config.api.token_env == "MY_TOKEN"
    assert config.api.timeout_seconds == 2.0

    payload = config_to_dict(config)
    assert payload["app"]["default_list"] == "owner/news"
    assert payload["store"]["path"] == str(config.store.path)


@pytest.mark.parametrize(
    ("body", "key"),
    [
        ('[app]\ndefault_list = ""\n', "app.default_list"),
        ('[app]\ndefault_list = "no-slash"\n', "app.default_list"),
        ('[app]\ndebug = "yes"\n', "app.debug"),
        ("[store]\nretention_days = 0\n", "store.retention_days"),
        ("[fetcher]\ninterval_seconds = -1\n", "fetcher.interval_seconds"),
        ("[fetcher]\ncount = true\n", "fetcher.count"),
        ('[api]\nbase_url = "ftp://example.test"\n', "api.base_url"),
        ("[api]\ntimeout_seconds = 0\n", "api.timeout_seconds"),
        ('app = "flat"\n', r"\[app\]"),
    ],
)
def test_load_runtime_config_reports_invalid_value(tmp_path: Path, body: str, key: str) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text(body, encoding="utf-8")
    with pytest.raises(ConfigError, match=key):
        load_runtime_config(config_path)
