import decimal
import os
from pathlib import Path

import yaml

from fixed_assets.core.periods import PERIODS_PER_YEAR

_DEFAULT_PATH = Path(__file__).parent.parent.parent / "config" / "depreciation.yaml"

_DEFAULTS = {
    "period_type": "monthly",
    "rounding": "ROUND_HALF_UP",
    "currency_places": 2,
    "logging": {"level": "INFO"},
    "cors": {"allow_origins": ["*"]},
}


def _config_path() -> Path:
    """Read DEPRECIATION_CONFIG_PATH at call time (supports env var changes in tests)."""
    return Path(os.getenv("DEPRECIATION_CONFIG_PATH", str(_DEFAULT_PATH)))


# Simple dict cache keyed by path to support test env var overrides
_cache: dict[str, dict] = {}


def load_settings() -> dict:
    """Load engine settings, filling in defaults for missing keys."""
    path = _config_path()
    cache_key = str(path)
    if cache_key in _cache:
        return _cache[cache_key]

    if not path.exists():
        raise FileNotFoundError(f"No depreciation settings found at {path}")

    with open(path) as f:
        loaded = yaml.safe_load(f) or {}

    settings = {**_DEFAULTS, **loaded}
    rounding = settings["rounding"]
    if not hasattr(decimal, rounding) or not rounding.startswith("ROUND_"):
        raise ValueError(f"Unknown rounding mode '{rounding}' in {path}")
    if settings["period_type"] not in PERIODS_PER_YEAR:
        raise ValueError(f"Unknown period type '{settings['period_type']}' in {path}")

    _cache[cache_key] = settings
    return settings


def get_rounding_mode() -> str:
    return getattr(decimal, load_settings()["rounding"])


def get_currency_places() -> int:
    return int(load_settings()["currency_places"])


def get_period_type() -> str:
    return load_settings()["period_type"]


def get_log_level() -> str:
    return load_settings().get("logging", {}).get("level", "INFO")


def get_cors_origins() -> list[str]:
    return load_settings().get("cors", {}).get("allow_origins", ["*"])
