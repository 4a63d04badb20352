"""
guarded_store.events
====================

The `ValueUpdated` notification, a synchronous listener bus, and a bounded
append-only event log.

The bus is synchronous, thread-safe, and tolerant of listener errors: a
listener that raises is logged with its traceback and the remaining
listeners still receive the event. Delivery order equals registration order,
and events are never replayed to listeners registered later.

Canonical receipt form
----------------------
    {
      "name": "0x" + hex(b"ValueUpdated"),
      "args": [
        {"k": "old_value", "t": "i", "v": 0},
        {"k": "new_value", "t": "i", "v": 5},
        {"k": "updater",   "t": "b", "v": "0x..."},
      ],
    }
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Deque, Dict, List, Optional

from .errors import StoreError
from .identity import to_hex

log = logging.getLogger(__name__)


# --------------------------------------------------------------------------------------
# Event model
# --------------------------------------------------------------------------------------


@dataclass(frozen=True)
class ValueUpdated:
    """Emitted on every successful update, before the new value is applied."""

    NAME: ClassVar[bytes] = b"ValueUpdated"

    old_value: int
    new_value: int
    updater: bytes

    @property
    def name(self) -> bytes:
        return self.NAME

    def args(self) -> Dict[str, Any]:
        return {
            "old_value": self.old_value,
            "new_value": self.new_value,
            "updater": self.updater,
        }

    def to_receipt(self) -> Dict[str, Any]:
        enc: List[Dict[str, Any]] = []
        for k, v in self.args().items():
            if isinstance(v, (bytes, bytearray)):
                enc.append({"k": k, "t": "b", "v": to_hex(v)})
            else:
                enc.append({"k": k, "t": "i", "v": int(v)})
        return {"name": to_hex(self.NAME), "args": enc}


Listener = Callable[[ValueUpdated], None]


# --------------------------------------------------------------------------------------
# Listener bus
# --------------------------------------------------------------------------------------


class Subscription:
    """Handle for one registration; each `subscribe` call gets its own id."""

    __slots__ = ("_bus", "id")

    def __init__(self, bus: "EventBus", sub_id: str):
        self._bus = bus
        self.id = sub_id

    @property
    def active(self) -> bool:
        return self._bus._has(self.id)

    def unsubscribe(self) -> None:
        self._bus._remove(self.id)


class EventBus:
    """
    A simple, synchronous, thread-safe listener list.

    - Registrations are keyed by subscription id, so the same callable may be
      subscribed more than once and each handle removes only its own entry
    - Best-effort delivery: listener exceptions are caught and logged
    - `publish` returns the number of listeners that completed without error
    """

    def __init__(self, *, max_listeners: int = 64):
        self._lock = threading.RLock()
        self._subs: Dict[str, Listener] = {}
        self._max = int(max_listeners)

    def subscribe(self, callback: Listener) -> Subscription:
        if not callable(callback):
            raise TypeError("callback must be callable")
        sub_id = uuid.uuid4().hex
        with self._lock:
            if len(self._subs) >= self._max:
                raise StoreError(
                    "listener limit reached",
                    code="STORE:TOO_MANY_LISTENERS",
                    context={"max_listeners": self._max},
                )
            self._subs[sub_id] = callback
            count = len(self._subs)
        log.debug("listener subscribed", extra={"listeners": count})
        return Subscription(self, sub_id)

    def unsubscribe(self, callback: Listener) -> None:
        """Remove the oldest registration of `callback` (no-op if absent)."""
        with self._lock:
            for sub_id, cb in self._subs.items():
                if cb == callback:
                    break
            else:
                return
            self._remove(sub_id)

    def _remove(self, sub_id: str) -> None:
        with self._lock:
            if self._subs.pop(sub_id, None) is None:
                return
            count = len(self._subs)
        log.debug("listener unsubscribed", extra={"listeners": count})

    def _has(self, sub_id: str) -> bool:
        with self._lock:
            return sub_id in self._subs

    def listeners(self) -> int:
        with self._lock:
            return len(self._subs)

    def publish(self, event: ValueUpdated) -> int:
        with self._lock:
            subs = list(self._subs.values())
        delivered = 0
        for cb in subs:
            try:
                cb(event)
                delivered += 1
            except Exception as e:
                log.warning("listener error on %s: %s", event.NAME.decode(), e, exc_info=True)
        return delivered


# --------------------------------------------------------------------------------------
# Event log
# --------------------------------------------------------------------------------------


class EventLog:
    """
    Append-only in-memory log of emitted events.

    Bounded by `maxlen`; once full the oldest entries are dropped. A `maxlen`
    of 0 keeps nothing (listeners are then the only consumers).
    """

    def __init__(self, maxlen: Optional[int] = 1024):
        self._lock = threading.Lock()
        self._items: Deque[ValueUpdated] = deque(maxlen=maxlen)
        self._total = 0

    def append(self, event: ValueUpdated) -> None:
        with self._lock:
            self._items.append(event)
            self._total += 1

    def snapshot(self) -> List[ValueUpdated]:
        with self._lock:
            return list(self._items)

    @property
    def total(self) -> int:
        """Number of events ever appended, including dropped ones."""
        with self._lock:
            return self._total

    def for_receipt(self) -> List[Dict[str, Any]]:
        return [ev.to_receipt() for ev in self.snapshot()]

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


__all__ = [
    "ValueUpdated",
    "Listener",
    "Subscription",
    "EventBus",
    "EventLog",
]
