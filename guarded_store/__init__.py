"""
guarded_store
=============

An owner-gated value store: one unsigned integer slot, an owner fixed at
construction, and a `ValueUpdated` notification on every successful write.

    from guarded_store import CallContext, GuardedValueStore

    alice = CallContext(sender=b"\\xaa" * 20)
    store = GuardedValueStore(alice)
    store.subscribe(print)
    store.update_value(alice, 5)   # prints ValueUpdated(old_value=0, new_value=5, ...)
"""

from __future__ import annotations

from .config import StoreConfig, load_config
from .errors import (AuthorizationError, ContextError, ReentrancyError,
                     StoreError, ValueRangeError)
from .events import EventBus, EventLog, Subscription, ValueUpdated
from .identity import CallContext, as_context
from .store import GuardedValueStore, StoreSnapshot
from .version import __version__

__all__ = [
    "__version__",
    "GuardedValueStore",
    "StoreSnapshot",
    "CallContext",
    "as_context",
    "ValueUpdated",
    "EventBus",
    "EventLog",
    "Subscription",
    "StoreConfig",
    "load_config",
    "StoreError",
    "AuthorizationError",
    "ValueRangeError",
    "ReentrancyError",
    "ContextError",
]
