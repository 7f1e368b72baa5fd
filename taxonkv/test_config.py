from collections.abc import Iterator
from pathlib import Path

import pytest

from . import config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.delenv("TAXONKV_STORE_FILENAME", raising=False)
    monkeypatch.delenv("TAXONKV_CONFIG_FILE", raising=False)
    yield
    config.set_network_available(value=None)


def _write_config(path: Path, text: str) -> Path:
    path.write_text(text)
    return path


def test_parse_config_file(tmp_path: Path) -> None:
    filename = _write_config(
        tmp_path / "taxonkv.ini",
        """
[taxonkv]
store_filename = data/matches.db
table_name = matches
num_of_key_buckets = 20
cache_size = 0
match_api_url = http://localhost:8080
match_min_interval = 0.5
num_workers = 0
""",
    )
    options = config.parse_config_file(filename)
    assert options == config.Options(
        store_filename=tmp_path / "data" / "matches.db",
        table_name="matches",
        num_of_key_buckets=20,
        cache_size=0,
        match_api_url="http://localhost:8080",
        match_min_interval=0.5,
        num_workers=1,
    )


def test_defaults(tmp_path: Path) -> None:
    filename = _write_config(tmp_path / "taxonkv.ini", "[taxonkv]\n")
    options = config.parse_config_file(filename)
    assert options.store_filename == tmp_path / "taxonkv.db"
    assert options._replace(store_filename=config.Options().store_filename) == config.Options()


def test_store_filename_from_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TAXONKV_STORE_FILENAME", "other.db")
    filename = _write_config(
        tmp_path / "taxonkv.ini", "[taxonkv]\nstore_filename = data/matches.db\n"
    )
    assert config.parse_config_file(filename).store_filename == tmp_path / "data" / "other.db"


def test_missing_section(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    filename = _write_config(tmp_path / "taxonkv.ini", "[other]\nkey = value\n")
    assert config.parse_config_file(filename) == config.Options()
    assert "missing required section" in capsys.readouterr().err


def test_invalid_bucket_count(tmp_path: Path) -> None:
    filename = _write_config(tmp_path / "taxonkv.ini", "[taxonkv]\nnum_of_key_buckets = 0\n")
    with pytest.raises(ValueError):
        config.parse_config_file(filename)


def test_get_options(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    filename = _write_config(tmp_path / "custom.ini", "[taxonkv]\ntable_name = custom\n")
    monkeypatch.setenv("TAXONKV_CONFIG_FILE", str(filename))
    assert config.get_options().table_name == "custom"


def test_network_available() -> None:
    config.set_network_available(value=False)
    assert not config.is_network_available()
    config.set_network_available(value=True)
    assert config.is_network_available()


def test_defaults_follow_options(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    defaults = config.Options(
        num_of_key_buckets=7,
        cache_size=16,
        match_api_timeout=2.5,
        match_min_interval=1.0,
        num_workers=3,
    )
    monkeypatch.setattr(config, "_DEFAULTS", defaults)
    filename = _write_config(tmp_path / "taxonkv.ini", "[taxonkv]\n")
    options = config.parse_config_file(filename)
    assert options._replace(store_filename=defaults.store_filename) == defaults
