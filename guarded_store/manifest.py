"""
guarded_store.manifest — packaged ABI manifest for the store.

The manifest names the callable entrypoints, their input/output types, the
emitted event and the error codes, so hosts that expose the store over RPC
can build dispatch tables without importing the implementation.
"""

from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources as importlib_resources
from typing import Any, Dict, List

from .errors import StoreError

MANIFEST_FILE = "manifest.json"


@lru_cache(maxsize=1)
def load_manifest() -> Dict[str, Any]:
    """Read and cache the packaged manifest.json."""
    try:
        raw = importlib_resources.files(__package__).joinpath(MANIFEST_FILE).read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise StoreError("packaged manifest missing", code="STORE:MANIFEST") from e
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise StoreError(f"invalid manifest json: {e}", code="STORE:MANIFEST") from e
    if not isinstance(data.get("abi"), dict):
        raise StoreError("manifest has no abi section", code="STORE:MANIFEST")
    return data


def entrypoints() -> List[str]:
    return [f["name"] for f in load_manifest()["abi"].get("functions", [])]


def event_fields(name: str) -> List[str]:
    for ev in load_manifest()["abi"].get("events", []):
        if ev.get("name") == name:
            return [i["name"] for i in ev.get("inputs", [])]
    raise StoreError(f"unknown event {name!r}", code="STORE:MANIFEST")


__all__ = ["MANIFEST_FILE", "load_manifest", "entrypoints", "event_fields"]
