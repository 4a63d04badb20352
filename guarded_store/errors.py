"""
guarded_store.errors
====================

Structured errors raised by the guarded value store.

Every error carries a short machine-readable ``code``, a human-readable
``message`` and an optional ``context`` mapping, and can be rendered with
``to_dict()`` for logs and RPC bridges.

Codes
-----
- ``STORE:ERROR``               generic store failure
- ``ACCESS:NOT_OWNER``          caller is not the owner (AuthorizationError)
- ``STORE:VALUE_RANGE``         value is not an unsigned int in range
- ``CONTROL:REENTRANT``         update attempted from inside an update
- ``CONTEXT:INVALID``           malformed identity / call context
- ``STORE:TOO_MANY_LISTENERS``  listener cap reached

This module uses only the stdlib.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional


class StoreError(Exception):
    """
    Root error for the package.

    Call patterns:

        StoreError("simple message")
        StoreError("message", code="SOME:CODE", context={...})
    """

    default_code = "STORE:ERROR"

    def __init__(
        self,
        message: str = "",
        *,
        code: Optional[str] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.code: str = str(code or self.default_code)
        self.message: str = str(message)
        self.context: Dict[str, Any] = dict(context or {})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "context": dict(self.context),
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


class AuthorizationError(StoreError):
    """Raised when a mutating call is made by an identity other than the owner."""

    default_code = "ACCESS:NOT_OWNER"

    def __init__(
        self,
        message: str = "caller is not owner",
        *,
        code: Optional[str] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, context=context)


class ValueRangeError(StoreError):
    """Value is not an unsigned integer within the configured bit width."""

    default_code = "STORE:VALUE_RANGE"


class ReentrancyError(StoreError):
    default_code = "CONTROL:REENTRANT"


class ContextError(StoreError):
    """Validation or coercion failure for a call context / identity."""

    default_code = "CONTEXT:INVALID"


__all__ = [
    "StoreError",
    "AuthorizationError",
    "ValueRangeError",
    "ReentrancyError",
    "ContextError",
]
