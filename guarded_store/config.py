"""
guarded_store.config — numeric caps and logging defaults for the store.

This module centralizes configuration for the guarded value store. It has
NO third-party deps and is safe to import very early.

Configuration precedence:
  1) Explicit StoreConfig passed to GuardedValueStore(...)
  2) Environment variables (GUARDED_STORE_*)
  3) Hardcoded safe defaults below

Key env vars:
  - GUARDED_STORE_VALUE_BITS      (int)  default: 256     (unsigned width of the slot)
  - GUARDED_STORE_MAX_EVENT_LOG   (int)  default: 1024    (0 disables the in-memory log)
  - GUARDED_STORE_MAX_LISTENERS   (int)  default: 64
  - GUARDED_STORE_LOG_LEVEL       (str)  default: INFO
  - GUARDED_STORE_LOG_FORMAT      (str)  json|text, default: auto (TTY -> text)

Usage:
    from guarded_store.config import load_config
    CFG = load_config()
    if value > CFG.max_value: ...
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, Optional

ENV_PREFIX = "GUARDED_STORE_"


# ----------------------------- helpers ---------------------------------------


def _env_int(name: str, default: int, *, min_v: int, max_v: int) -> int:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None:
        return default
    try:
        v = int(raw.strip(), 0)
    except ValueError:
        return default
    if v < min_v:
        return min_v
    if v > max_v:
        return max_v
    return v


def _env_str(name: str, default: Optional[str]) -> Optional[str]:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def _env_log_format() -> Optional[str]:
    fmt = _env_str("LOG_FORMAT", None)
    if fmt is None:
        return None
    fmt = fmt.lower()
    return fmt if fmt in ("json", "text") else None


# ------------------------------- config --------------------------------------


@dataclass(frozen=True)
class StoreConfig:
    # Unsigned width of the value slot
    value_bits: int = 256

    # Bounded in-memory event log (0 = disabled)
    max_event_log: int = 1024

    # Registered listener cap per store
    max_listeners: int = 64

    # Logging
    log_level: str = "INFO"
    log_format: Optional[str] = None

    @property
    def max_value(self) -> int:
        return (1 << self.value_bits) - 1

    def as_dict(self) -> Dict[str, Any]:
        return {
            "value_bits": self.value_bits,
            "max_value": self.max_value,
            "max_event_log": self.max_event_log,
            "max_listeners": self.max_listeners,
            "log_level": self.log_level,
            "log_format": self.log_format,
        }


@lru_cache(maxsize=1)
def load_config() -> StoreConfig:
    """
    Build and cache a StoreConfig from environment + safe defaults.

    Tests that tweak the environment call ``load_config.cache_clear()``.
    """
    return StoreConfig(
        value_bits=_env_int("VALUE_BITS", 256, min_v=8, max_v=512),
        max_event_log=_env_int("MAX_EVENT_LOG", 1024, min_v=0, max_v=1_000_000),
        max_listeners=_env_int("MAX_LISTENERS", 64, min_v=1, max_v=10_000),
        log_level=(_env_str("LOG_LEVEL", "INFO") or "INFO").upper(),
        log_format=_env_log_format(),
    )


__all__ = ["StoreConfig", "load_config", "ENV_PREFIX"]
