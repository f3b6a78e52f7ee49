"""
Exporter configuration - Loads and validates the YAML target list.

Two layouts are accepted:

    # list form
    workers: 5
    timeout: 10
    targets:
      - url: https://example.com/app.js
        hash: 3a6eb0790f39ac87c94f3856b2dd2c5d110e6811602261a9a923d3bb23adc8b7
      - url: https://example.com/
        impersonate: chrome120

    # map form: url -> expected hash (empty or null means observe only)
    https://example.com/app.js: 3a6eb0790f39ac87c94f3856b2dd2c5d110e6811602261a9a923d3bb23adc8b7
    https://example.com/: ""
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml

from .base import DEFAULT_TIMEOUT
from .controller import DEFAULT_WORKERS
from .errors import ConfigError
from .models import Target

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExporterConfig:
    workers: int = DEFAULT_WORKERS
    timeout: float = DEFAULT_TIMEOUT
    targets: List[Target] = field(default_factory=list)


def load_config(path: str) -> ExporterConfig:
    """
    Load exporter configuration from a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        Validated ExporterConfig

    Raises:
        ConfigError: If the file cannot be read or is invalid
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"can't open configuration file: {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in configuration file {path}: {e}") from e

    config = parse_config(data)
    logger.info("Loaded %d targets from %s", len(config.targets), path)
    return config


def parse_config(data: Any) -> ExporterConfig:
    """Validate already-decoded configuration data."""
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("configuration must be a mapping")

    if "targets" in data:
        return _parse_list_form(data)
    return _parse_map_form(data)


def _parse_list_form(data: Dict[str, Any]) -> ExporterConfig:
    workers = data.get("workers") or 0
    if not isinstance(workers, int) or isinstance(workers, bool):
        raise ConfigError("field 'workers' must be an int")
    if workers <= 0:
        workers = DEFAULT_WORKERS

    timeout = data.get("timeout", DEFAULT_TIMEOUT)
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ConfigError("field 'timeout' must be a positive number")

    raw_targets = data.get("targets") or []
    if not isinstance(raw_targets, list):
        raise ConfigError("field 'targets' must be a list")

    targets = [_validate_target(i, entry) for i, entry in enumerate(raw_targets)]
    _check_unique(targets)
    return ExporterConfig(workers=workers, timeout=float(timeout), targets=targets)


def _parse_map_form(data: Dict[str, Any]) -> ExporterConfig:
    targets: List[Target] = []
    for url, expected in data.items():
        if not isinstance(url, str) or not url:
            raise ConfigError(f"target url must be a non-empty string: {url!r}")
        if expected is None:
            expected = ""
        if not isinstance(expected, str):
            raise ConfigError(f"expected hash must be a string for target: {url}")
        targets.append(Target(url=url, expected_hash=expected.strip()))
    return ExporterConfig(targets=targets)


def _validate_target(index: int, entry: Any) -> Target:
    if not isinstance(entry, dict):
        raise ConfigError(f"target #{index} must be a mapping")

    url = entry.get("url")
    if not isinstance(url, str) or not url:
        raise ConfigError(f"missing required field 'url' for target #{index}")

    expected = entry.get("hash") or ""
    if not isinstance(expected, str):
        raise ConfigError(f"field 'hash' must be a string for target: {url}")

    impersonate: Optional[str] = entry.get("impersonate")
    if impersonate is not None and not isinstance(impersonate, str):
        raise ConfigError(f"field 'impersonate' must be a string for target: {url}")

    return Target(url=url, expected_hash=expected.strip(), impersonate=impersonate or None)


def _check_unique(targets: List[Target]) -> None:
    seen = set()
    for target in targets:
        if target.url in seen:
            raise ConfigError(f"duplicate target url: {target.url}")
        seen.add(target.url)
