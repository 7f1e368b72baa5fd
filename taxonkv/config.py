import configparser
import functools
import os
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import NamedTuple


class Options(NamedTuple):
    store_filename: Path = Path("taxonkv.db")
    table_name: str = "name_usage_match"
    column_family: str = "v"
    value_column_qualifier: str = "j"
    # Salted keys embed the bucket index, so this must never change once the
    # table holds data. Changing it requires reindexing into a fresh table.
    num_of_key_buckets: int = 10
    cache_size: int = 2048

    match_api_url: str = "https://api.gbif.org"
    match_api_timeout: float = 30.0
    match_min_interval: float = 0.0
    num_workers: int = 4


_DEFAULTS = Options()


def error(message: str) -> None:
    print(message, file=sys.stderr)


def parse_path(section: Mapping[str, str], key: str, base_path: Path) -> Path:
    if key not in section:
        return base_path / getattr(_DEFAULTS, key)
    else:
        raw_path = section[key]
        path = Path(raw_path).expanduser()
        if not path.is_absolute():
            path = base_path / path
        return path


_network_available: bool | None = None


def set_network_available(*, value: bool | None) -> None:
    global _network_available
    _network_available = value


def is_network_available() -> bool:
    if _network_available is not None:
        return _network_available
    return _is_network_available_from_env()


@functools.cache
def _is_network_available_from_env() -> bool:
    return not bool(os.environ.get("TAXONKV_NO_NETWORK"))


@functools.cache
def parse_config_file(filename: Path) -> Options:
    parser = configparser.ConfigParser()
    parser.read(filename)
    try:
        section = parser["taxonkv"]
    except KeyError:
        error(f'config file {filename} missing required section "taxonkv"')
        return Options()
    else:
        base_path = filename.parent
        store_filename = parse_path(section, "store_filename", base_path)
        if "TAXONKV_STORE_FILENAME" in os.environ:
            store_filename = store_filename.parent / os.environ["TAXONKV_STORE_FILENAME"]
        num_of_key_buckets = section.getint(
            "num_of_key_buckets", _DEFAULTS.num_of_key_buckets
        )
        if num_of_key_buckets <= 0:
            raise ValueError(
                f"num_of_key_buckets must be positive, got {num_of_key_buckets}"
            )
        return Options(
            store_filename=store_filename,
            table_name=section.get("table_name", _DEFAULTS.table_name),
            column_family=section.get("column_family", _DEFAULTS.column_family),
            value_column_qualifier=section.get(
                "value_column_qualifier", _DEFAULTS.value_column_qualifier
            ),
            num_of_key_buckets=num_of_key_buckets,
            cache_size=section.getint("cache_size", _DEFAULTS.cache_size),
            match_api_url=section.get("match_api_url", _DEFAULTS.match_api_url),
            match_api_timeout=section.getfloat(
                "match_api_timeout", _DEFAULTS.match_api_timeout
            ),
            match_min_interval=section.getfloat(
                "match_min_interval", _DEFAULTS.match_min_interval
            ),
            num_workers=max(1, section.getint("num_workers", _DEFAULTS.num_workers)),
        )


def get_options() -> Options:
    if "TAXONKV_CONFIG_FILE" in os.environ:
        config_file = Path(os.environ["TAXONKV_CONFIG_FILE"])
    else:
        config_file = Path(__file__).parent.parent / "taxonkv.ini"
    return parse_config_file(config_file)
