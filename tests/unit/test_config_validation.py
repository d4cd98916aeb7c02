from pathlib import Path

import jsonschema
import pytest
import yaml

from metriccatcher.common.settings import (
    DEFAULT_SCHEMA_PATH,
    compute_config_hash,
    load_settings,
    validate_config,
)


def _base_config() -> dict:
    return {
        "environment": "local",
        "app_log_path": "logs/app.log",
        "log_level": "INFO",
    }


def _write(tmp_path: Path, config: dict) -> Path:
    path = tmp_path / "settings.yaml"
    path.write_text(yaml.safe_dump(config))
    return path


def test_validate_config_accepts_minimal_config() -> None:
    validate_config(_base_config(), DEFAULT_SCHEMA_PATH)


def test_validate_config_accepts_all_reporters() -> None:
    config = _base_config()
    config["udp"] = {"host": "127.0.0.1", "port": 1420}
    config["max_metrics"] = 50
    config["reporters"] = {
        "graphite": {"host": "carbon", "port": 2003, "prefix": "web-1", "interval_sec": 30},
        "ganglia": {"host": "gmond", "port": 8649},
        "file": {"path": "logs/metrics.log"},
    }
    validate_config(config, DEFAULT_SCHEMA_PATH)


def test_validate_config_rejects_invalid_environment() -> None:
    config = _base_config()
    config["environment"] = "dev"
    with pytest.raises(jsonschema.ValidationError):
        validate_config(config, DEFAULT_SCHEMA_PATH)


def test_validate_config_rejects_zero_max_metrics() -> None:
    config = _base_config()
    config["max_metrics"] = 0
    with pytest.raises(jsonschema.ValidationError):
        validate_config(config, DEFAULT_SCHEMA_PATH)


def test_validate_config_requires_reporter_port() -> None:
    config = _base_config()
    config["reporters"] = {"graphite": {"host": "carbon"}}
    with pytest.raises(jsonschema.ValidationError):
        validate_config(config, DEFAULT_SCHEMA_PATH)


def test_validate_config_rejects_unknown_top_level_key() -> None:
    config = _base_config()
    config["unexpected"] = True
    with pytest.raises(jsonschema.ValidationError):
        validate_config(config, DEFAULT_SCHEMA_PATH)


def test_load_settings_applies_defaults(tmp_path) -> None:
    settings = load_settings(_write(tmp_path, _base_config()))

    assert settings.udp_host == "0.0.0.0"
    assert settings.udp_port == 1420
    assert settings.max_metrics == 500
    assert settings.dedup_capacity == 1000
    assert settings.reporter("graphite") is None


def test_load_settings_reads_reporters(tmp_path) -> None:
    config = _base_config()
    config["udp"] = {"port": 9999}
    config["reporters"] = {"graphite": {"host": "carbon", "port": 2003}}
    settings = load_settings(_write(tmp_path, config))

    graphite = settings.reporter("graphite")
    assert settings.udp_port == 9999
    assert graphite is not None
    assert (graphite.host, graphite.port, graphite.interval_sec) == ("carbon", 2003, 60)
    assert graphite.prefix is None


def test_load_settings_missing_file(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "missing.yaml")


def test_config_hash_is_stable(tmp_path) -> None:
    path = _write(tmp_path, _base_config())
    assert compute_config_hash(path) == compute_config_hash(path)
    assert len(compute_config_hash(path)) == 64


def test_shipped_settings_file_is_valid() -> None:
    path = Path(__file__).resolve().parents[2] / "config" / "settings.yaml"
    settings = load_settings(path)
    assert settings.reporter("file") is not None
