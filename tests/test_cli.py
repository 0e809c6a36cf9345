from pathlib import Path

import pytest

import main
from config.sources import ALL_SOURCES, get_source_domain, validate_sources
from config.version import PROJECT_VERSION


def test_sources_lists_whole_catalogue(capsys):
    assert main.main(["sources"]) == 0
    out = capsys.readouterr().out
    assert f"{len(ALL_SOURCES)} sources" in out


def test_sources_filtered_by_category(capsys):
    assert main.main(["sources", "--category", "sport"]) == 0
    out = capsys.readouterr().out
    assert "4 sources" in out
    assert "L'Équipe" in out
    assert "Culture" not in out


def test_unknown_category_lists_nothing(capsys):
    assert main.main(["sources", "--category", "Astrologie"]) == 0
    assert "0 sources" in capsys.readouterr().out


def test_parser_requires_a_command():
    with pytest.raises(SystemExit):
        main.build_parser().parse_args([])


def test_version_flag(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main.build_parser().parse_args(["--version"])
    assert excinfo.value.code == 0
    assert PROJECT_VERSION in capsys.readouterr().out


def test_configuration_error_exits_with_code_2(tmp_path: Path, capsys):
    config_file = tmp_path / "config.toml"
    config_file.write_text("[storage\ndriver = ", encoding="utf-8")
    assert main.main(["--config", str(config_file), "recategorize"]) == 2
    assert "Configuration error" in capsys.readouterr().err


def test_catalogue_is_valid():
    assert validate_sources() == len(ALL_SOURCES)
    assert get_source_domain("eurosport") == "https://www.eurosport.fr"
    assert get_source_domain("Inconnu") is None


def test_validate_sources_rejects_bad_entries():
    with pytest.raises(ValueError, match="missing field url"):
        validate_sources({"x": {"name": "X", "category": "Tech"}})
    with pytest.raises(ValueError, match="invalid URL"):
        validate_sources({"x": {"name": "X", "category": "Tech", "url": "ftp://x"}})


def test_config_package_exposes_settings_lazily():
    import config
    from config import sources

    assert config.get_sources_by_category is sources.get_sources_by_category
    assert config.PROJECT_VERSION == PROJECT_VERSION
    with pytest.raises(AttributeError):
        config.NOT_A_SETTING
