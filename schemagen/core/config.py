"""
Runtime settings.

Environment variables:
    SCHEMAGEN_ENV                      dev (default) | prod
    SCHEMAGEN_DEFAULT_DIALECT          dialect used when a caller names none (default: c)
    SCHEMAGEN_CHECK_HIGH_WATER_MARKS   1 (default) | 0 for legacy models
    SCHEMAGEN_OPTIONS_FILE             optional YAML/JSON generator option overrides

Options file format (YAML or JSON), keyed by dialect:
    c:
      function_name: create_obx_model
      guard: OBJECTBOX_MODEL_H
    python:
      runtime: mydb.descriptor
"""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional

import yaml

_log = logging.getLogger("schemagen.config")

OptionOverrides = Dict[str, Dict[str, str]]


def _env_flag(name: str, default: bool) -> bool:
    raw = (os.getenv(name) or "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


def current_env() -> str:
    return (os.getenv("SCHEMAGEN_ENV") or "dev").strip().lower()


def default_dialect() -> str:
    return (os.getenv("SCHEMAGEN_DEFAULT_DIALECT") or "c").strip().lower()


def check_high_water_marks_enabled() -> bool:
    return _env_flag("SCHEMAGEN_CHECK_HIGH_WATER_MARKS", True)


def _resolve_options_path(path: Optional[Path]) -> Optional[Path]:
    if path is not None:
        return Path(path)
    env_path = os.getenv("SCHEMAGEN_OPTIONS_FILE", "").strip()
    if env_path:
        return Path(env_path)
    return None


def load_option_overrides(path: Optional[Path] = None) -> OptionOverrides:
    """
    Load per-dialect generator option overrides.

    Returns an empty dict when no file is configured, or when it is missing,
    unreadable or malformed; callers fall back to dialect defaults.
    """
    resolved = _resolve_options_path(path)
    if resolved is None or not resolved.exists():
        return {}

    try:
        raw_text = resolved.read_text(encoding="utf-8")
    except OSError as exc:
        _log.warning("Cannot read options file %s: %s", resolved, exc)
        return {}

    try:
        data = json.loads(raw_text)
    except json.JSONDecodeError:
        try:
            data = yaml.safe_load(raw_text)
        except yaml.YAMLError as exc:
            _log.warning("Failed to parse options file %s as JSON or YAML: %s", resolved, exc)
            return {}

    if not isinstance(data, dict):
        _log.warning("Options file %s must be a mapping, got %s", resolved, type(data).__name__)
        return {}

    out: OptionOverrides = {}
    for dialect, values in data.items():
        if not isinstance(values, dict):
            _log.warning("Skipping options for %r: expected a mapping", dialect)
            continue
        out[str(dialect).strip().lower()] = {str(k): str(v) for k, v in values.items() if v is not None}

    if out:
        _log.info("Loaded generator options for %s from %s", sorted(out), resolved)
    return out
