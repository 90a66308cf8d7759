"""Standalone-safe configuration surface for security_performance_engine."""

from __future__ import annotations

import os
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except Exception:
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except Exception:
        return default


_DEFAULTS: dict[str, Any] = {
    # minor currency units per unit (cents)
    "AMOUNT_DIVIDER": _env_int("SPE_AMOUNT_DIVIDER", 100),
    # fractional share unit used for every per-share rounding
    "SHARE_FACTOR": _env_int("SPE_SHARE_FACTOR", 1_000_000),
    "DIVIDEND_DEFAULTS": {
        "event_gap_days": _env_int("SPE_DIVIDEND_EVENT_GAP_DAYS", 30),
        "freshness_window_days": _env_int("SPE_DIVIDEND_FRESHNESS_DAYS", 410),
        "accrual_window_days": _env_int("SPE_DIVIDEND_ACCRUAL_DAYS", 320),
        "share_weighting_anchor_days": _env_int("SPE_DIVIDEND_SHARE_ANCHOR_DAYS", 365),
        "min_years_for_growth": _env_int("SPE_DIVIDEND_MIN_GROWTH_YEARS", 3),
        "growth_days_per_year": _env_float("SPE_DIVIDEND_GROWTH_DAYS_PER_YEAR", 365.25),
    },
    "IRR_DEFAULTS": {
        "initial_guess": _env_float("SPE_IRR_INITIAL_GUESS", 0.1),
        "max_iterations": _env_int("SPE_IRR_MAX_ITERATIONS", 500),
        "tolerance": _env_float("SPE_IRR_TOLERANCE", 1e-10),
        "days_per_year": _env_float("SPE_IRR_DAYS_PER_YEAR", 365.0),
        "bracket_low": _env_float("SPE_IRR_BRACKET_LOW", -0.9999),
        "bracket_high": _env_float("SPE_IRR_BRACKET_HIGH", 100.0),
    },
}


try:  # pragma: no cover - monorepo defaults
    import settings as _settings  # type: ignore

    for key in list(_DEFAULTS.keys()):
        if hasattr(_settings, key):
            _DEFAULTS[key] = getattr(_settings, key)
except Exception:
    pass


AMOUNT_DIVIDER = int(_DEFAULTS["AMOUNT_DIVIDER"])
SHARE_FACTOR = int(_DEFAULTS["SHARE_FACTOR"])
DIVIDEND_DEFAULTS = _DEFAULTS["DIVIDEND_DEFAULTS"]
IRR_DEFAULTS = _DEFAULTS["IRR_DEFAULTS"]


def configure(**overrides: Any) -> None:
    """Programmatically override package configuration values."""
    globals_dict = globals()
    for key, value in overrides.items():
        if key not in _DEFAULTS:
            raise KeyError(f"Unknown config key: {key}")
        globals_dict[key] = value


def _merge_section(key: str, value: Any) -> Any:
    current = globals().get(key)
    if isinstance(current, dict) and isinstance(value, dict):
        unknown = set(value) - set(_DEFAULTS[key])
        if unknown:
            raise KeyError(f"Unknown {key} keys: {sorted(unknown)}")
        return {**current, **value}
    return value


def configure_from_file(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Apply overrides from a YAML file and return the parsed mapping.

    Top-level keys are config keys; dict sections (``DIVIDEND_DEFAULTS``,
    ``IRR_DEFAULTS``) are merged into the current values, so a file only
    lists what it changes:

        SHARE_FACTOR: 10000
        DIVIDEND_DEFAULTS:
          event_gap_days: 45

    ``path`` defaults to ``$SPE_CONFIG_FILE``. An empty file changes nothing.
    """
    path = path or os.getenv("SPE_CONFIG_FILE")
    if not path:
        raise ValueError("No config file given and SPE_CONFIG_FILE is not set")
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise TypeError(f"Config file {path} must contain a mapping, got {type(raw).__name__}")

    unknown = set(raw) - set(_DEFAULTS)
    if unknown:
        raise KeyError(f"Unknown config keys in {path}: {sorted(unknown)}")
    configure(**{key: _merge_section(key, value) for key, value in raw.items()})
    return raw


if os.getenv("SPE_CONFIG_FILE"):
    configure_from_file()
