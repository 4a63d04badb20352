"""
guarded_store.store
===================

`GuardedValueStore`: a single unsigned integer slot, an owner fixed at
construction, and a `ValueUpdated` notification on every successful write.

Public surface
--------------
    store = GuardedValueStore(CallContext(sender=alice))

    store.get_value()                      -> int   (anyone)
    store.get_owner()                      -> bytes (anyone)
    store.update_value(ctx, new_value)     -> None  (owner only)
    store.subscribe(listener)              -> Subscription

Update semantics
----------------
1. The caller is checked against the owner first. A mismatch raises
   `AuthorizationError` with no state change and no event.
2. `new_value` must be an int in ``[0, 2**value_bits - 1]``
   (`ValueRangeError` otherwise, again with no effect).
3. `ValueUpdated(old, new, caller)` is logged and delivered to listeners.
4. Only then is the slot set to `new_value`. This also happens when a
   listener escapes with a BaseException (KeyboardInterrupt, SystemExit), so
   a logged event always has its value applied.

Steps 1-4 run under one lock; readers take the same lock, so nobody can see
an event whose value has not been applied yet. Writing the current value is
allowed and still emits an event with ``old_value == new_value``.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from .config import StoreConfig, load_config
from .errors import AuthorizationError, ReentrancyError, ValueRangeError
from .events import EventBus, EventLog, Listener, Subscription, ValueUpdated
from .identity import CallContext, IdentityLike, as_context, to_hex
from .logging import call_scope

log = logging.getLogger(__name__)

Caller = Union[CallContext, IdentityLike]


@dataclass(frozen=True)
class StoreSnapshot:
    """Consistent point-in-time view of a store."""

    value: int
    owner: bytes
    updates: int

    def to_dict(self) -> Dict[str, Any]:
        return {"value": self.value, "owner": to_hex(self.owner), "updates": self.updates}


class GuardedValueStore:
    """Owner-gated unsigned integer slot with change notifications."""

    def __init__(self, creator: Caller, *, config: Optional[StoreConfig] = None) -> None:
        ctx = as_context(creator)
        self._config = config or load_config()
        self._owner: bytes = ctx.sender
        self._value: int = 0
        self._updates = 0
        self._lock = threading.RLock()
        self._updating = False
        self._bus = EventBus(max_listeners=self._config.max_listeners)
        self._log = EventLog(maxlen=self._config.max_event_log)

        with call_scope(ctx.trace_id):
            log.info("store created", extra={"owner": to_hex(self._owner)})

    @classmethod
    def construct(cls, creator: Caller, *, config: Optional[StoreConfig] = None) -> "GuardedValueStore":
        return cls(creator, config=config)

    # ---- reads ---- #

    @property
    def owner(self) -> bytes:
        return self._owner

    @property
    def value(self) -> int:
        return self.get_value()

    @property
    def config(self) -> StoreConfig:
        return self._config

    def get_value(self) -> int:
        with self._lock:
            return self._value

    def get_owner(self) -> bytes:
        return self._owner

    def is_owner(self, identity: Caller) -> bool:
        return as_context(identity).sender == self._owner

    def snapshot(self) -> StoreSnapshot:
        with self._lock:
            return StoreSnapshot(value=self._value, owner=self._owner, updates=self._updates)

    def events(self) -> List[ValueUpdated]:
        with self._lock:
            return self._log.snapshot()

    def to_dict(self) -> Dict[str, Any]:
        d = self.snapshot().to_dict()
        d["value_bits"] = self._config.value_bits
        d["listeners"] = self._bus.listeners()
        return d

    # ---- listeners ---- #

    def subscribe(self, listener: Listener) -> Subscription:
        return self._bus.subscribe(listener)

    def unsubscribe(self, listener: Listener) -> None:
        self._bus.unsubscribe(listener)

    # ---- writes ---- #

    def update_value(self, caller: Caller, new_value: int) -> None:
        """
        Owner-only: set the slot to `new_value`.

        Raises AuthorizationError if `caller` is not the owner,
        ValueRangeError if `new_value` is not an in-range unsigned int, and
        ReentrancyError if called from a listener of this store.
        """
        ctx = as_context(caller)
        with self._lock, call_scope(ctx.trace_id):
            if ctx.sender != self._owner:
                log.warning(
                    "update rejected: caller is not owner",
                    extra={"caller": ctx.sender_hex},
                )
                raise AuthorizationError(
                    context={"caller": ctx.sender_hex, "owner": to_hex(self._owner)},
                )
            if self._updating:
                log.warning("update rejected: reentrant call", extra={"caller": ctx.sender_hex})
                raise ReentrancyError("update_value called while an update is in progress")
            self._check_value(new_value)

            event = ValueUpdated(old_value=self._value, new_value=int(new_value), updater=ctx.sender)
            self._updating = True
            try:
                self._emit(event)
            finally:
                # Once emission has started the value is applied, even if a
                # listener escapes with a BaseException.
                self._updating = False
                self._value = event.new_value
                self._updates += 1

            log.info(
                "value updated",
                extra={"old_value": event.old_value, "new_value": event.new_value, "caller": ctx.sender_hex},
            )

    # ---- internals ---- #

    def _check_value(self, v: Any) -> None:
        # bool is a subclass of int, so check it first.
        if isinstance(v, bool) or not isinstance(v, int):
            log.warning("update rejected: value is not an int", extra={"py_type": type(v).__name__})
            raise ValueRangeError(
                "value must be an unsigned integer",
                context={"py_type": type(v).__name__},
            )
        if v < 0 or v > self._config.max_value:
            log.warning("update rejected: value out of range", extra={"bits": self._config.value_bits})
            raise ValueRangeError(
                f"value out of range (must fit in {self._config.value_bits} unsigned bits)",
                context={"bits": self._config.value_bits, "value_bit_length": v.bit_length()},
            )

    def _emit(self, event: ValueUpdated) -> None:
        if self._config.max_event_log > 0:
            self._log.append(event)
        self._bus.publish(event)

    def __repr__(self) -> str:
        return f"GuardedValueStore(owner={to_hex(self._owner)}, value={self.get_value()})"


__all__ = ["GuardedValueStore", "StoreSnapshot", "Caller"]
