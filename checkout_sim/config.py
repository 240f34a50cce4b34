# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# config.py
# -----------------------------------------------------------------------------
# Purpose:
#   Load the YAML run configuration, layer it over built-in defaults, apply
#   scenario overrides and validate everything before a run is built.
#
# Design notes:
#   - All configuration faults raise ConfigError; nothing is scheduled until
#     validate_cfg() has passed.
#   - Times are in SECONDS throughout (arrival interval, scan times, duration).
#
# Usage:
#   cfg = load_cfg()                      # config/baseline.yaml
#   cfg = apply_overrides(cfg, {"balancer": {"strategy": "random"}})
#   validate_cfg(cfg)
# -----------------------------------------------------------------------------

from __future__ import annotations
import copy, os
from typing import Dict, Optional

import yaml

from .errors import ConfigError
from .policies import Policy

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DEFAULT_PATH = os.path.join(ROOT, "config", "baseline.yaml")

DEFAULTS: Dict = {
    "sim": {
        "duration": 3600.0,
        "seed": 0,
    },
    "cashiers": {
        "count": 3,
        "item_time_min": 0.5,
        "item_time_max": 2.0,
    },
    "balancer": {
        "strategy": "round_robin",
    },
    "shop": {
        "arrival_interval": 6.0,
        "items_min": 1,
        "items_max": 25,
        "max_customers": None,
    },
    "experiments": {
        "replications": 5,
        "confidence_level": 0.95,
        "crn_compare": [],
    },
}

def apply_overrides(cfg: Dict, overrides: Dict) -> Dict:
    """Apply overrides (recursive merge) on top of a config; inputs untouched."""
    new = copy.deepcopy(cfg)

    def _merge(dst: Dict, src: Dict):
        for key, val in src.items():
            if isinstance(val, dict) and isinstance(dst.get(key), dict):
                _merge(dst[key], val)
            else:
                dst[key] = copy.deepcopy(val)

    _merge(new, overrides or {})
    return new

def load_cfg(path: Optional[str] = None) -> Dict:
    """Read a YAML config and merge it over DEFAULTS."""
    path = path or DEFAULT_PATH
    with open(path, "r") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ConfigError(path, "top level of the config must be a mapping")
    return apply_overrides(DEFAULTS, raw)

def _number(cfg: Dict, section: str, key: str) -> float:
    val = cfg.get(section, {}).get(key)
    if isinstance(val, bool) or not isinstance(val, (int, float)):
        raise ConfigError(f"{section}.{key}", f"must be a number, got {val!r}")
    return float(val)

def validate_cfg(cfg: Dict) -> Dict:
    """Raise ConfigError on the first invalid setting; return cfg unchanged."""
    count = cfg.get("cashiers", {}).get("count")
    if isinstance(count, bool) or not isinstance(count, int) or count <= 0:
        raise ConfigError("cashiers.count", f"must be a positive integer, got {count!r}")
    if _number(cfg, "shop", "arrival_interval") <= 0:
        raise ConfigError("shop.arrival_interval", "must be > 0")
    if _number(cfg, "sim", "duration") <= 0:
        raise ConfigError("sim.duration", "must be > 0")
    Policy.parse(cfg.get("balancer", {}).get("strategy"))

    lo, hi = _number(cfg, "shop", "items_min"), _number(cfg, "shop", "items_max")
    if lo != int(lo) or hi != int(hi) or not (1 <= lo <= hi):
        raise ConfigError("shop.items_min", f"need integers 1 <= items_min <= items_max, got [{lo}, {hi}]")
    t_lo, t_hi = _number(cfg, "cashiers", "item_time_min"), _number(cfg, "cashiers", "item_time_max")
    if not (0 < t_lo <= t_hi):
        raise ConfigError("cashiers.item_time_min", f"need 0 < item_time_min <= item_time_max, got [{t_lo}, {t_hi}]")

    cap = cfg.get("shop", {}).get("max_customers")
    if cap is not None and (isinstance(cap, bool) or not isinstance(cap, int) or cap < 0):
        raise ConfigError("shop.max_customers", f"must be a non-negative integer or null, got {cap!r}")
    return cfg
