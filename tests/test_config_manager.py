from __future__ import annotations

from pathlib import Path

import pytest

from config.settings import storage_settings, validate_config
from superfacts.config_manager import (
    Config,
    ConfigError,
    explain,
    load_config,
    main,
    save_config,
)
from superfacts.config_schema import DEFAULT_CONFIG, iter_field_docs


def _flatten(mapping: dict[str, object], prefix: str = "") -> set[str]:
    keys: set[str] = set()
    for name, value in mapping.items():
        path = f"{prefix}.{name}" if prefix else name
        if isinstance(value, dict):
            keys.add(path)
            keys.update(_flatten(value, path))
        else:
            keys.add(path)
    return keys


def test_precedence_env_overrides(tmp_path: Path) -> None:
    config_file = tmp_path / "config.toml"
    config_file.write_text("[collection]\nrequest_timeout_seconds = 15\n", encoding="utf-8")
    env_file = tmp_path / ".env"
    env_file.write_text(
        "SUPERFACTS__COLLECTION__REQUEST_TIMEOUT_SECONDS=20\n", encoding="utf-8"
    )
    environ = {"SUPERFACTS__COLLECTION__REQUEST_TIMEOUT_SECONDS": "25"}
    config = load_config(config_file, environ=environ)
    assert config.collection.request_timeout_seconds == 25
    provenance = config._metadata.provenance["collection.request_timeout_seconds"]
    assert provenance.layer == "env"
    assert provenance.env_var == "SUPERFACTS__COLLECTION__REQUEST_TIMEOUT_SECONDS"


def test_env_file_overrides_toml(tmp_path: Path) -> None:
    config_file = tmp_path / "config.toml"
    config_file.write_text("[news]\nhot_limit = 10\n", encoding="utf-8")
    (tmp_path / ".env").write_text("SUPERFACTS__NEWS__HOT_LIMIT=12\n", encoding="utf-8")
    config = load_config(config_file, environ={})
    assert config.news.hot_limit == 12
    assert config._metadata.provenance["news.hot_limit"].layer == "env-file"
    assert config._metadata.provenance["news.default_limit"].layer == "defaults"


def test_file_values_are_recorded(tmp_path: Path) -> None:
    config_file = tmp_path / "config.toml"
    config_file.write_text('[seo]\nsite_url = "https://example.fr/"\n', encoding="utf-8")
    config = load_config(config_file, environ={})
    assert config.seo.site_url == "https://example.fr"
    assert config._metadata.provenance["seo.site_url"].layer == "file"


def test_save_config_round_trips(tmp_path: Path) -> None:
    config_file = tmp_path / "config.toml"
    config_file.write_text("[collection]\nitems_per_source = 5\n", encoding="utf-8")
    config = load_config(config_file, environ={})
    data = config.model_dump(mode="python")
    data["collection"]["items_per_source"] = 12
    updated = Config.model_validate(data)
    updated._metadata = config._metadata
    assert save_config(updated) == config_file
    reloaded = load_config(config_file, environ={})
    assert reloaded.collection.items_per_source == 12
    assert not list(tmp_path.glob(".superfacts-config-*"))


def test_save_config_drops_optional_none(tmp_path: Path) -> None:
    config_file = tmp_path / "config.toml"
    config_file.write_text("[storage]\nport = 5432\n", encoding="utf-8")
    config = load_config(config_file, environ={})
    data = config.model_dump(mode="python")
    data["storage"]["port"] = None
    updated = Config.model_validate(data)
    updated._metadata = config._metadata
    save_config(updated)
    content = config_file.read_text(encoding="utf-8")
    assert "port =" not in content


def test_blank_storage_port_normalized(tmp_path: Path) -> None:
    config_file = tmp_path / "config.toml"
    config_file.write_text('[storage]\nport = ""\n', encoding="utf-8")
    config = load_config(config_file, environ={})
    assert config.storage.port is None


def test_validation_errors_report_source(tmp_path: Path) -> None:
    config_file = tmp_path / "config.toml"
    config_file.write_text("[collection]\nrequest_timeout_seconds = 'abc'\n", encoding="utf-8")
    with pytest.raises(ConfigError) as excinfo:
        load_config(config_file, environ={})
    assert "collection.request_timeout_seconds" in str(excinfo.value)
    assert "file" in str(excinfo.value)


def test_env_validation_error_names_variable(tmp_path: Path) -> None:
    environ = {"SUPERFACTS__NEWS__HOT_WINDOW_HOURS": "-3"}
    with pytest.raises(ConfigError) as excinfo:
        load_config(tmp_path / "config.toml", environ=environ)
    assert "SUPERFACTS__NEWS__HOT_WINDOW_HOURS" in str(excinfo.value)


def test_invalid_storage_driver_is_rejected(tmp_path: Path) -> None:
    config_file = tmp_path / "config.toml"
    config_file.write_text('[storage]\ndriver = "mongodb"\n', encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(config_file, environ={})


def test_postgresql_requires_connection_fields(tmp_path: Path) -> None:
    environ = {"SUPERFACTS__STORAGE__DRIVER": "postgresql", "SUPERFACTS__STORAGE__HOST": "db"}
    with pytest.raises(ConfigError) as excinfo:
        load_config(tmp_path / "config.toml", environ=environ)
    assert "port" in str(excinfo.value)


def test_explain_masks_secrets(tmp_path: Path) -> None:
    environ = {"SUPERFACTS__STORAGE__PASSWORD": "hunter2"}
    config = load_config(tmp_path / "config.toml", environ=environ)
    rendered = explain(config, "storage.password")
    assert "hunter2" not in rendered
    assert "***masked***" in rendered
    assert "SUPERFACTS__STORAGE__PASSWORD" in rendered

    with pytest.raises(ConfigError):
        explain(config, "storage.nonexistent")


def test_storage_settings_resolve_documents(tmp_path: Path) -> None:
    environ = {"SUPERFACTS__PATHS__DATA_DIR": str(tmp_path)}
    config = load_config(tmp_path / "config.toml", environ=environ)
    settings = storage_settings(config)
    assert settings["type"] == "json"
    assert settings["articles_path"] == tmp_path / "articles.json"
    assert settings["performance_path"] == tmp_path / "ad-performance.json"


def test_validate_config_cross_field_checks(tmp_path: Path) -> None:
    environ = {
        "SUPERFACTS__NEWS__HOT_LIMIT": "50",
        "SUPERFACTS__STORAGE__MAX_ARTICLES": "10",
    }
    config = load_config(tmp_path / "config.toml", environ=environ)
    with pytest.raises(ConfigError, match="hot_limit"):
        validate_config(config)

    config = load_config(
        tmp_path / "config.toml",
        environ={"SUPERFACTS__STORAGE__ADS_FILE": "articles.json"},
    )
    with pytest.raises(ConfigError, match="distinct"):
        validate_config(config)


def test_cli_validate(tmp_path: Path, monkeypatch, capsys) -> None:
    config_file = tmp_path / "config.toml"
    config_file.write_text("[news]\nhot_limit = 5\n", encoding="utf-8")
    monkeypatch.delenv("SUPERFACTS__NEWS__HOT_LIMIT", raising=False)
    assert main(["--config", str(config_file), "--validate"]) == 0
    assert "Configuration OK" in capsys.readouterr().out

    config_file.write_text("[news]\nhot_limit = 0\n", encoding="utf-8")
    assert main(["--config", str(config_file), "--validate"]) == 1
    assert "news.hot_limit" in capsys.readouterr().err


def test_cli_dump_defaults(capsys) -> None:
    assert main(["--dump-defaults"]) == 0
    output = capsys.readouterr().out
    assert "[collection]" in output
    assert "items_per_source = 8" in output


def test_schema_keys_cover_defaults() -> None:
    schema_keys = {
        entry["name"]
        for entry in iter_field_docs(DEFAULT_CONFIG)
        if not entry.get("is_nested")
    }
    default_keys = _flatten(DEFAULT_CONFIG.model_dump(mode="python"))
    assert schema_keys.issubset(default_keys)


@pytest.mark.parametrize(
    "path",
    [
        "app.timezone",
        "collection.items_per_source",
        "collection.duplicate_similarity_threshold",
        "news.hot_window_hours",
        "seo.rss_max_items",
        "ads.sidebar_refresh_seconds",
        "storage.driver",
        "server.api_prefix",
        "logging.level",
    ],
)
def test_implicit_keys_are_defined(path: str) -> None:
    schema_keys = {
        entry["name"]
        for entry in iter_field_docs(DEFAULT_CONFIG)
        if not entry.get("is_nested")
    }
    assert path in schema_keys
