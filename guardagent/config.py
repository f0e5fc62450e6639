"""Application configuration loaded from a YAML file."""

from __future__ import annotations

from dataclasses import dataclass, fields

import yaml


@dataclass
class AppConfig:
    """Settings for the guard proxy."""

    listen: str = ""
    model_url: str = ""
    model_name: str = ""
    api_key: str = ""
    rules_file: str = ""


def load_config(path) -> AppConfig:
    """Read the YAML file at *path*; unknown keys are ignored."""
    with open(path, encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    if not isinstance(data, dict):
        raise ValueError("config document must be a mapping")
    names = {f.name for f in fields(AppConfig)}
    values = {}
    for key, value in data.items():
        if key not in names:
            continue
        if isinstance(value, (dict, list)):
            raise ValueError(f"config key {key!r} must be a scalar value")
        if isinstance(value, bool):
            value = str(value).lower()
        values[key] = "" if value is None else str(value)
    return AppConfig(**values)