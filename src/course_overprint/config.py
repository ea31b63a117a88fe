from __future__ import annotations

import copy
from pathlib import Path
from typing import Any, Dict, Mapping, MutableMapping, Optional, Sequence, Tuple

import yaml

HARDCODED_DEFAULTS: Dict[str, Any] = {
    "overprint": {
        "color": "#A626FF",
        "white_out_fill": "white",
        "padding_mm": 10.0,
    },
    "description_sheet": {
        "cell_size": 25.0,
        "font_size": 14.0,
        "margin": 5.0,
        "baseline_offset": 7.0,
        "line_color": "black",
        "distance_scale": 15000.0,
    },
}


def load_config(path: str | Path) -> dict:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Config not found: {p}")
    data = yaml.safe_load(p.read_text(encoding="utf-8"))
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ValueError(f"Config {p} must be a mapping")
    return dict(data)


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    for key in base:
        value = base[key]
        if isinstance(value, Mapping):
            result[key] = copy.deepcopy(value)
        elif isinstance(value, list):
            result[key] = list(value)
        else:
            result[key] = value
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(result.get(key), Mapping):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def set_nested(config: MutableMapping[str, Any], path: Sequence[str], value: Any) -> None:
    if not path:
        return
    cursor: MutableMapping[str, Any] = config
    for key in path[:-1]:
        next_value = cursor.get(key)
        if not isinstance(next_value, MutableMapping):
            next_value = {}
            cursor[key] = next_value
        cursor = next_value
    cursor[path[-1]] = value


def parse_override(entry: str) -> Tuple[Tuple[str, ...], Any]:
    if "=" not in entry:
        raise ValueError("--opts expects 'path=value'")
    raw_path, raw_value = entry.split("=", 1)
    path = tuple(part.strip() for part in raw_path.split(".") if part.strip())
    if not path:
        raise ValueError("--opts needs a key path, e.g. overprint.color")
    try:
        value = yaml.safe_load(raw_value)
    except yaml.YAMLError as exc:
        raise ValueError(f"--opts {raw_path}: could not parse value ({exc})") from exc
    return path, value


def resolve_config(
    path: Optional[str | Path] = None, overrides: Sequence[str] = ()
) -> Dict[str, Any]:
    cfg = copy.deepcopy(HARDCODED_DEFAULTS)
    if path is not None:
        cfg = deep_merge(cfg, load_config(path))
    for entry in overrides:
        key_path, value = parse_override(entry)
        set_nested(cfg, key_path, value)
    return cfg


def section(cfg: Optional[Mapping[str, Any]], name: str) -> Dict[str, Any]:
    """Defaults for *name* overlaid with whatever *cfg* provides."""
    base = HARDCODED_DEFAULTS.get(name, {})
    if not cfg:
        return dict(base)
    value = cfg.get(name)
    if not isinstance(value, Mapping):
        return dict(base)
    return deep_merge(base, value)
