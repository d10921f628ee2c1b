from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from accent_color.errors import AccentColorError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = Path(__file__).resolve().parents[2] / "config" / "accent.v1.yaml"
DEFAULT_WORKER_FRACTION = 0.75
ENV_MAX_WORKERS = "ACCENT_COLOR_MAX_WORKERS"
ENV_DOWNSAMPLE = "ACCENT_COLOR_DOWNSAMPLE"


@dataclass(frozen=True)
class AccentConfig:
    downsample_factor: int = 1
    worker_fraction: float = DEFAULT_WORKER_FRACTION
    max_workers: int | None = None


def _clamp_value(value: float, min_value: float, max_value: float) -> float:
    return max(min_value, min(max_value, value))


def _invalid(path: Path | None, detail: str) -> AccentColorError:
    return AccentColorError(
        code="E3002_CONFIG_INVALID",
        message=f"Invalid accent config{f' {path}' if path else ''}: {detail}",
        hint="Check downsample_factor, worker_fraction and max_workers values.",
    )


def _load_yaml(path: Path) -> dict[str, Any]:
    data = yaml.safe_load(path.read_text())
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise AccentColorError(
            code="E3002_CONFIG_INVALID",
            message=f"Accent config must be a mapping: {path}",
            hint="Ensure the accent config YAML is a mapping at the top level.",
        )
    return data


def _env_int(name: str) -> int | None:
    env_value = os.environ.get(name)
    if not env_value:
        return None
    try:
        return int(env_value)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r", name, env_value)
        return None


def config_from_mapping(data: dict[str, Any], path: Path | None = None) -> AccentConfig:
    try:
        downsample = max(int(data.get("downsample_factor", 1) or 1), 1)
        fraction = float(data.get("worker_fraction", DEFAULT_WORKER_FRACTION))
        max_workers_raw = data.get("max_workers")
        max_workers = int(max_workers_raw) if max_workers_raw is not None else None
    except (TypeError, ValueError) as exc:
        raise _invalid(path, str(exc)) from exc
    if fraction <= 0:
        raise _invalid(path, f"worker_fraction must be positive, got {fraction}")
    fraction = _clamp_value(fraction, 0.0, 1.0)
    if max_workers is not None:
        max_workers = max(max_workers, 1)
    return AccentConfig(
        downsample_factor=downsample,
        worker_fraction=fraction,
        max_workers=max_workers,
    )


def _apply_env(config: AccentConfig) -> AccentConfig:
    max_workers = _env_int(ENV_MAX_WORKERS)
    downsample = _env_int(ENV_DOWNSAMPLE)
    if max_workers is None and downsample is None:
        return config
    return AccentConfig(
        downsample_factor=max(downsample, 1) if downsample is not None else config.downsample_factor,
        worker_fraction=config.worker_fraction,
        max_workers=max(max_workers, 1) if max_workers is not None else config.max_workers,
    )


def load_config(path: Path | None = None) -> AccentConfig:
    """Load the accent config, then apply environment overrides.

    An explicit ``path`` must exist. Without one, the repository default is
    used when present and built-in defaults otherwise.
    """
    if path is not None:
        if not path.exists():
            raise AccentColorError(
                code="E3001_CONFIG_MISSING",
                message=f"Accent config not found: {path}",
                hint="Pass an existing YAML file or omit --config.",
            )
        config = config_from_mapping(_load_yaml(path), path)
    elif DEFAULT_CONFIG.exists():
        config = config_from_mapping(_load_yaml(DEFAULT_CONFIG), DEFAULT_CONFIG)
    else:
        logger.debug("Default config %s not found; using built-in defaults", DEFAULT_CONFIG)
        config = AccentConfig()
    return _apply_env(config)
