"""Central configuration for the redirect store tools."""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, cast

DEFAULT_DATA_DIR = "data"
DATA_DIR_ENV = "REDIRECTS_DATA_DIR"
METRICS_TEXTFILE_ENV = "REDIRECTS_METRICS_TEXTFILE"

_PLACEHOLDER_RE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::([^}]*))?\}")


@dataclass(frozen=True)
class StoreConfig:
    """Location of the shard directory and optional metrics output."""

    data_dir: Path = Path(DEFAULT_DATA_DIR)
    metrics_textfile: Path | None = None

    @classmethod
    def from_env(
        cls,
        *,
        data_dir: Path | str | None = None,
        metrics_textfile: Path | str | None = None,
    ) -> "StoreConfig":
        """Build config from explicit values, falling back to the environment."""

        if data_dir is not None:
            resolved_dir = str(data_dir)
        else:
            resolved_dir = os.environ.get(DATA_DIR_ENV, DEFAULT_DATA_DIR)
        if not resolved_dir:
            raise ValueError("data_dir must be a non-empty path")

        if metrics_textfile is not None:
            resolved_textfile: str | None = str(metrics_textfile)
        else:
            resolved_textfile = os.environ.get(METRICS_TEXTFILE_ENV) or None

        return cls(
            data_dir=Path(resolved_dir),
            metrics_textfile=Path(resolved_textfile) if resolved_textfile else None,
        )

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "StoreConfig":
        data_dir = raw.get("data_dir")
        metrics_textfile = raw.get("metrics_textfile")
        if data_dir is not None and not isinstance(data_dir, str):
            raise ValueError("data_dir must be a string")
        if metrics_textfile is not None and not isinstance(metrics_textfile, str):
            raise ValueError("metrics_textfile must be a string")
        return cls.from_env(data_dir=data_dir, metrics_textfile=metrics_textfile)


def load_config_file(path: Path) -> Dict[str, Any]:
    """Load a JSON or YAML config mapping, substituting ``${VAR}`` placeholders."""

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    suffix = path.suffix.lower()
    raw: Any
    if suffix == ".json":
        raw = json.loads(path.read_text())
    elif suffix in {".yaml", ".yml"}:
        import yaml

        raw = yaml.safe_load(path.read_text())
    else:
        raise ValueError("Unsupported config format; use .json, .yaml, or .yml")
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValueError("Config must decode to a mapping")
    return _expand_env(cast(Dict[str, Any], raw))


def resolve_config(
    *,
    config_path: Path | str | None = None,
    data_dir: Path | str | None = None,
) -> StoreConfig:
    """Combine a config file and command-line overrides into a StoreConfig.

    Precedence: explicit ``data_dir``, then the config file, then the
    environment, then defaults.
    """

    raw: Dict[str, Any] = load_config_file(Path(config_path)) if config_path is not None else {}
    if data_dir is not None:
        raw = {**raw, "data_dir": str(data_dir)}
    return StoreConfig.from_mapping(raw)


def _expand_placeholder(match: re.Match[str]) -> str:
    name, default = match.group(1), match.group(2)
    value = os.environ.get(name, default)
    if value is None:
        raise ValueError(f"Missing environment variable {name} for placeholder in config")
    return value


def _expand_env(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """Expand ``${VAR}`` and ``${VAR:default}`` in the string values of a flat mapping."""

    expanded: Dict[str, Any] = {}
    for key, value in raw.items():
        if isinstance(value, str):
            if "${" in _PLACEHOLDER_RE.sub("", value):
                raise ValueError(f"Malformed placeholder in config value for {key}: {value!r}")
            value = _PLACEHOLDER_RE.sub(_expand_placeholder, value)
        expanded[key] = value
    return expanded
