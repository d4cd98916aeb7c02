from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import Optional, Sequence

import jsonschema
import yaml
from dotenv import load_dotenv

from metriccatcher.common.settings import DEFAULT_CONFIG_PATH, load_settings
from metriccatcher.orchestrator.service import Orchestrator


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="UDP metric catcher")
    parser.add_argument(
        "-c",
        "--config",
        default=None,
        help=f"Path to settings YAML (default: $METRICCATCHER_CONFIG or {DEFAULT_CONFIG_PATH})",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    load_dotenv()
    config_path = Path(args.config or os.getenv("METRICCATCHER_CONFIG") or DEFAULT_CONFIG_PATH)

    try:
        settings = load_settings(config_path)
    except (FileNotFoundError, yaml.YAMLError, jsonschema.ValidationError) as exc:
        print(f"[BOOT][FAIL] {exc}", file=sys.stderr)
        return 1

    orchestrator = Orchestrator(settings=settings)
    try:
        orchestrator.run()
    except OSError as exc:
        print(f"[BOOT][FAIL] cannot bind udp {settings.udp_host}:{settings.udp_port}: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
