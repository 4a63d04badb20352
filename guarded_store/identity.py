"""
guarded_store.identity — the caller context passed into store operations.

The enclosing host (RPC server, CLI, test) authenticates its callers and maps
them onto a `CallContext`. The store never reads an ambient "current sender";
every mutating call receives the context explicitly.

Design notes
------------
- Identities are opaque raw bytes compared by equality. No fixed length is
  enforced so hosts may use 20-byte, 32-byte or any other principal handles.
- Strings prefixed with "0x" are decoded as hex. Any other string is an
  opaque handle and is used as its UTF-8 bytes, so "bob" and "0x626f62" name
  the same principal while "aa" and "0xaa" do not.
- An empty identity is never valid.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from .errors import ContextError

IdentityLike = Union[bytes, bytearray, memoryview, str]


# ----------------------------- helpers ----------------------------- #


def _strip_0x(s: str) -> str:
    return s[2:] if s.startswith(("0x", "0X")) else s


def to_bytes(value: IdentityLike) -> bytes:
    """
    Coerce `value` to bytes.
    - If a "0x"-prefixed str, decode the hex; odd-length or non-hex is rejected.
    - Any other str is an opaque handle: its UTF-8 bytes.
    - If a bytes-like object, copy to immutable bytes.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        if not value.startswith(("0x", "0X")):
            return value.encode("utf-8")
        h = _strip_0x(value.strip())
        if len(h) % 2 != 0:
            raise ContextError(
                f"hex string must have even length, got {len(h)}",
                context={"where": "hex_length"},
            )
        try:
            return bytes.fromhex(h)
        except ValueError as e:
            raise ContextError(f"invalid hex string: {value!r}", context={"where": "hex_digits"}) from e
    raise ContextError(
        f"cannot convert type {type(value).__name__} to bytes",
        context={"where": "type", "py_type": type(value).__name__},
    )


def to_hex(b: Union[bytes, bytearray, memoryview]) -> str:
    """Encode bytes as 0x-prefixed lowercase hex."""
    return "0x" + bytes(b).hex()


# ----------------------------- model ------------------------------ #


@dataclass(frozen=True)
class CallContext:
    """
    Per-invocation context.

    Fields
    ------
    sender:    Identity of the caller (raw bytes, non-empty).
    trace_id:  Optional host trace id, copied into log lines.
    """

    sender: bytes
    trace_id: Optional[str] = None

    def __post_init__(self) -> None:
        sender = to_bytes(self.sender)
        if len(sender) == 0:
            raise ContextError("sender identity must be non-empty", context={"where": "sender_empty"})
        object.__setattr__(self, "sender", sender)
        if self.trace_id is not None and not isinstance(self.trace_id, str):
            raise ContextError("trace_id must be str", context={"where": "trace_id_type"})

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CallContext":
        if "sender" not in d:
            raise ContextError("missing sender", context={"where": "sender_missing"})
        return cls(sender=to_bytes(d["sender"]), trace_id=d.get("trace_id"))

    def to_dict(self) -> Dict[str, Any]:
        return {"sender": to_hex(self.sender), "trace_id": self.trace_id}

    @property
    def sender_hex(self) -> str:
        return to_hex(self.sender)


def as_context(value: Union[CallContext, IdentityLike]) -> CallContext:
    """Accept either a ready CallContext or a raw identity."""
    if isinstance(value, CallContext):
        return value
    return CallContext(sender=to_bytes(value))


__all__ = [
    "IdentityLike",
    "CallContext",
    "as_context",
    "to_bytes",
    "to_hex",
]
