from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict

import yaml

DEFAULT_CONFIG: Dict[str, Any] = {
    "data_root": "~/.local/share/pixelpad",
    "editor": {
        "max_history": 50,
        "brush": {
            "shape": "square",
            "size": 1,
            "opacity": 1.0,
            "color": [0, 0, 0, 255],
        },
    },
    "reducer": {
        "color_count": 16,
        "algorithm": "median-cut",
        "dithering": False,
    },
    "logging": {
        "level": "INFO",
        "keep_files": 7,
        "console": False,
    },
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if (
            key in merged
            and isinstance(merged[key], dict)
            and isinstance(value, dict)
        ):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _candidate_config_paths() -> list[Path]:
    env_path = os.environ.get("PIXELPAD_CONFIG")
    paths = []
    if env_path:
        paths.append(Path(env_path))
    paths.extend([
        Path("pixelpad.yaml"),
        Path.home() / ".config" / "pixelpad" / "config.yaml",
    ])
    return paths


def load_config() -> Dict[str, Any]:
    config = dict(DEFAULT_CONFIG)
    for path in _candidate_config_paths():
        if path.exists():
            with path.open("r", encoding="utf-8") as handle:
                data = yaml.safe_load(handle) or {}
            if isinstance(data, dict):
                config = _deep_merge(config, data)
            break
    return config
