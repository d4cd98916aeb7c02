from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import jsonschema
import yaml

from metriccatcher.ingest.dedup import DEFAULT_DEDUP_CAPACITY
from metriccatcher.metrics.registry import DEFAULT_MAX_METRICS

DEFAULT_CONFIG_PATH = Path("config/settings.yaml")
DEFAULT_SCHEMA_PATH = Path(__file__).resolve().parent / "schema.json"

DEFAULT_UDP_HOST = "0.0.0.0"
DEFAULT_UDP_PORT = 1420
DEFAULT_REPORT_INTERVAL_SEC = 60


@dataclass(frozen=True)
class ReporterSettings:
    interval_sec: int
    host: Optional[str] = None
    port: Optional[int] = None
    prefix: Optional[str] = None
    path: Optional[str] = None

    @staticmethod
    def from_raw(raw: Dict[str, Any]) -> "ReporterSettings":
        port = raw.get("port")
        return ReporterSettings(
            interval_sec=int(raw.get("interval_sec", DEFAULT_REPORT_INTERVAL_SEC)),
            host=raw.get("host"),
            port=int(port) if port is not None else None,
            prefix=raw.get("prefix"),
            path=raw.get("path"),
        )


@dataclass(frozen=True)
class Settings:
    environment: str
    app_log_path: str
    log_level: str
    udp_host: str
    udp_port: int
    max_metrics: int
    dedup_capacity: int
    config_path: Path
    raw: Dict[str, Any]

    def reporter(self, name: str) -> Optional[ReporterSettings]:
        section = self.raw.get("reporters", {}).get(name)
        if not section:
            return None
        return ReporterSettings.from_raw(section)


def compute_config_hash(config_path: Path) -> str:
    data = config_path.read_bytes()
    return hashlib.sha256(data).hexdigest()


def load_yaml(path: Path) -> Dict[str, Any]:
    data = yaml.safe_load(path.read_text())
    return data or {}


def validate_config(config: Dict[str, Any], schema_path: Path = DEFAULT_SCHEMA_PATH) -> None:
    schema = json.loads(schema_path.read_text())
    jsonschema.validate(instance=config, schema=schema)


def settings_from_config(config: Dict[str, Any], config_path: Path) -> Settings:
    udp = config.get("udp", {})
    return Settings(
        environment=str(config.get("environment", "local")),
        app_log_path=str(config.get("app_log_path", "logs/metriccatcher.log")),
        log_level=str(config.get("log_level", "INFO")),
        udp_host=str(udp.get("host", DEFAULT_UDP_HOST)),
        udp_port=int(udp.get("port", DEFAULT_UDP_PORT)),
        max_metrics=int(config.get("max_metrics", DEFAULT_MAX_METRICS)),
        dedup_capacity=int(config.get("dedup_capacity", DEFAULT_DEDUP_CAPACITY)),
        config_path=config_path,
        raw=config,
    )


def load_settings(config_path: Path, schema_path: Path = DEFAULT_SCHEMA_PATH) -> Settings:
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    if not schema_path.exists():
        raise FileNotFoundError(f"Schema file not found: {schema_path}")

    config = load_yaml(config_path)
    validate_config(config, schema_path)
    return settings_from_config(config, config_path)
