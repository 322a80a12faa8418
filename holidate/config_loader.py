from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

import yaml


@dataclass
class ConfigData:
    raw: Dict[str, Any]


def load_yaml_config(path: str | None = None) -> ConfigData:
    path = path or os.getenv("HOLIDATE_CONFIG", "config.yaml")
    p = Path(path)
    if not p.exists():
        return ConfigData(raw={})

    try:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError):
        data = {}

    if not isinstance(data, dict):
        data = {}
    return ConfigData(raw=data)
