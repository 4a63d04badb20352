"""guarded_store.version — package version string.

Resolution order:
  1) GUARDED_STORE_VERSION environment variable (exact value)
  2) Installed package metadata for 'guarded-store'
  3) BASE_VERSION + '+dev'
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import metadata as importlib_metadata
from typing import Optional

BASE_VERSION = "0.1.0"
DIST_NAME = "guarded-store"


def _pkg_metadata_version(dist_name: str = DIST_NAME) -> Optional[str]:
    try:
        v = importlib_metadata.version(dist_name)
        return v if v and v != "0.0.0" else None
    except importlib_metadata.PackageNotFoundError:
        return None


@lru_cache(maxsize=1)
def compute_version() -> str:
    val = os.getenv("GUARDED_STORE_VERSION")
    if val:
        return val
    return _pkg_metadata_version() or f"{BASE_VERSION}+dev"


__version__ = compute_version()

__all__ = ["__version__", "BASE_VERSION", "compute_version"]
