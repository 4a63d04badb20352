"""
Shared pytest fixtures for the guarded value store:
- Deterministic identities derived from tags via sha3_256
- A fresh store owned by "alice" per test
- A recording listener that captures delivered ValueUpdated events
- Config cache reset so env-driven tests don't leak into each other
"""
from __future__ import annotations

import hashlib
from typing import Callable, List

import pytest

from guarded_store import CallContext, GuardedValueStore, ValueUpdated
from guarded_store.config import load_config


def det_identity(tag: str) -> bytes:
    """Stable 20-byte identity for a tag."""
    return hashlib.sha3_256(b"guarded-store-tests|" + tag.encode("utf-8")).digest()[:20]


@pytest.fixture(autouse=True)
def _fresh_config(monkeypatch: pytest.MonkeyPatch):
    for name in (
        "GUARDED_STORE_VALUE_BITS",
        "GUARDED_STORE_MAX_EVENT_LOG",
        "GUARDED_STORE_MAX_LISTENERS",
        "GUARDED_STORE_LOG_LEVEL",
        "GUARDED_STORE_LOG_FORMAT",
    ):
        monkeypatch.delenv(name, raising=False)
    load_config.cache_clear()
    yield
    load_config.cache_clear()


@pytest.fixture
def alice() -> CallContext:
    return CallContext(sender=det_identity("alice"))


@pytest.fixture
def bob() -> CallContext:
    return CallContext(sender=det_identity("bob"))


@pytest.fixture
def store(alice: CallContext) -> GuardedValueStore:
    return GuardedValueStore(alice)


class Recorder:
    def __init__(self) -> None:
        self.events: List[ValueUpdated] = []

    def __call__(self, event: ValueUpdated) -> None:
        self.events.append(event)


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def make_store() -> Callable[..., GuardedValueStore]:
    def _make(tag: str = "alice", **kwargs) -> GuardedValueStore:
        return GuardedValueStore(CallContext(sender=det_identity(tag)), **kwargs)

    return _make


@pytest.fixture
def identity() -> Callable[[str], bytes]:
    return det_identity
