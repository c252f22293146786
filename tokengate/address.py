# -*- coding: utf-8 -*-
"""
tokengate.address
=================

Account helpers. Accounts are raw, non-empty ``bytes``; hex strings are a
presentation concern and are normalized here at the edges (CLI, config).

The burn destination is the *null sentinel* ``NULL_ACCOUNT`` (``b"\\x00"``).
Any all-zero byte string is treated as the null sentinel so that
``0x00`` and a zero-padded 20-byte address compare the same way.
"""

from __future__ import annotations

import hashlib
from typing import Final, Union

from .errors import InvalidAccount

Account = bytes
AccountLike = Union[bytes, bytearray, str]

NULL_ACCOUNT: Final[bytes] = b"\x00"


def is_null(account: bytes) -> bool:
    """True iff ``account`` is the null sentinel (all zero bytes)."""
    return len(account) > 0 and not any(account)


def require_account(account: bytes) -> bytes:
    """
    Ensure ``account`` is non-empty bytes and return it as immutable ``bytes``.
    Widths are not fixed here; callers that need a fixed size check locally.
    """
    if not isinstance(account, (bytes, bytearray)) or len(account) == 0:
        raise InvalidAccount("account must be non-empty bytes", value=account)
    return bytes(account)


def to_account(value: AccountLike) -> bytes:
    """
    Normalize ``value`` to account bytes.

    Accepts raw bytes or a ``0x``-prefixed (or bare) hex string.
    """
    if isinstance(value, (bytes, bytearray)):
        return require_account(value)
    if not isinstance(value, str):
        raise InvalidAccount("unsupported account type", value=type(value).__name__)
    s = value.strip()
    if s[:2].lower() == "0x":
        s = s[2:]
    if not s:
        raise InvalidAccount("empty account", value=value)
    if len(s) % 2:
        s = "0" + s
    try:
        raw = bytes.fromhex(s)
    except ValueError:
        raise InvalidAccount("account is not valid hex", value=value) from None
    return require_account(raw)


def to_hex(account: bytes) -> str:
    return "0x" + bytes(account).hex()


def derive_account(tag: str) -> bytes:
    """
    Deterministic 20-byte account from a label. Used by the devnet CLI and tests
    to get stable, human-addressable accounts ("owner", "alice", ...).
    """
    return hashlib.sha3_256(tag.encode("utf-8")).digest()[:20]


__all__ = [
    "Account",
    "AccountLike",
    "NULL_ACCOUNT",
    "is_null",
    "require_account",
    "to_account",
    "to_hex",
    "derive_account",
]
