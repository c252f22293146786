from __future__ import annotations

import re
from dataclasses import dataclass
from threading import Lock
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

# Event names emitted by the gate and the ledger.
EVT_PAUSED = b"Paused"
EVT_UNPAUSED = b"Unpaused"
EVT_BLACKLISTED = b"Blacklisted"
EVT_WHITELISTED = b"Whitelisted"
EVT_OWNERSHIP_TRANSFERRED = b"OwnershipTransferred"
EVT_TRANSFER = b"Transfer"
EVT_APPROVAL = b"Approval"

MAX_EVENT_NAME_BYTES = 64
MAX_KEY_LEN = 64
MAX_BYTES_LEN = 4096
MAX_INT_BITS = 256

_KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

ArgValue = Any  # constrained at runtime


class EventError(ValueError):
    """Raised when an event name or argument fails validation."""


@dataclass(frozen=True)
class Event:
    """An emitted notification. ``seq`` is the position in the owning log."""

    seq: int
    name: bytes
    args: Dict[str, ArgValue]


@dataclass(frozen=True)
class CanonicalEvent:
    """
    Receipt-friendly event representation:

        name: "0x" + hex-encoded event name bytes
        args: sequence of {"k", "t", "v"} dicts
              t="b" => bytes encoded as 0x-prefixed hex
              t="i" => integer
              t="z" => boolean
    """

    name: str
    args: Sequence[Mapping[str, Any]]

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "args": [dict(a) for a in self.args]}


def _check_name(name: Any) -> bytes:
    if not isinstance(name, (bytes, bytearray)):
        raise EventError("event name must be bytes")
    b = bytes(name)
    if not b:
        raise EventError("event name must be non-empty")
    if len(b) > MAX_EVENT_NAME_BYTES:
        raise EventError(f"event name too long ({len(b)} bytes)")
    return b


def _check_key(key: Any) -> str:
    if not isinstance(key, str) or not key:
        raise EventError("event key must be a non-empty str")
    if len(key) > MAX_KEY_LEN:
        raise EventError(f"event key too long ({len(key)})")
    if not _KEY_RE.match(key):
        raise EventError(f"event key has invalid characters: {key!r}")
    return key


def _check_value(value: Any) -> ArgValue:
    if isinstance(value, (bytes, bytearray)):
        b = bytes(value)
        if len(b) > MAX_BYTES_LEN:
            raise EventError(f"event bytes arg too long ({len(b)})")
        return b
    if isinstance(value, bool):
        # bool is a subclass of int, so check it before int.
        return value
    if isinstance(value, int):
        if value.bit_length() > MAX_INT_BITS:
            raise EventError("event int arg out of range")
        return int(value)
    raise EventError(f"unsupported event arg type: {type(value).__name__}")


def _encode_arg(k: str, v: ArgValue) -> Dict[str, Any]:
    if isinstance(v, (bytes, bytearray)):
        return {"k": k, "t": "b", "v": "0x" + bytes(v).hex()}
    if isinstance(v, bool):
        return {"k": k, "t": "z", "v": v}
    return {"k": k, "t": "i", "v": int(v)}


def _decode_arg(a: Mapping[str, Any]) -> ArgValue:
    t, v = a["t"], a["v"]
    if t == "b":
        return bytes.fromhex(str(v)[2:])
    if t == "z":
        return bool(v)
    if t == "i":
        return int(v)
    raise EventError(f"unknown event arg tag: {t!r}")


class EventLog:
    """
    Append-only event sink owned by one token instance.

    The gate and the ledger share a log so the emitted order matches the order
    in which state changed.
    """

    def __init__(self) -> None:
        self._events: List[Event] = []
        self._lock = Lock()

    def emit(self, name: bytes, args: Optional[Mapping[Any, Any]] = None) -> Event:
        bname = _check_name(name)
        if args is not None and not isinstance(args, Mapping):
            raise EventError("event args must be a mapping")
        checked: Dict[str, ArgValue] = {}
        for raw_k, raw_v in (args or {}).items():
            checked[_check_key(raw_k)] = _check_value(raw_v)
        with self._lock:
            ev = Event(seq=len(self._events), name=bname, args=checked)
            self._events.append(ev)
        return ev

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self):
        return iter(tuple(self._events))

    @property
    def events(self) -> List[Event]:
        return list(self._events)

    def names(self) -> List[bytes]:
        return [e.name for e in self._events]

    def since(self, seq: int) -> List[Event]:
        return [e for e in self._events if e.seq >= seq]

    # --- receipts / persistence ---------------------------------------------

    def for_receipt(self, events: Optional[Iterable[Event]] = None) -> List[CanonicalEvent]:
        out: List[CanonicalEvent] = []
        for ev in self._events if events is None else events:
            out.append(
                CanonicalEvent(
                    name="0x" + ev.name.hex(),
                    args=tuple(_encode_arg(k, v) for k, v in ev.args.items()),
                )
            )
        return out

    def dump(self) -> List[Dict[str, Any]]:
        return [c.to_dict() for c in self.for_receipt()]

    @classmethod
    def load(cls, data: Iterable[Mapping[str, Any]]) -> "EventLog":
        log = cls()
        for item in data:
            name = bytes.fromhex(str(item["name"])[2:])
            args = {a["k"]: _decode_arg(a) for a in item.get("args", [])}
            log.emit(name, args)
        return log


__all__ = [
    "EVT_PAUSED",
    "EVT_UNPAUSED",
    "EVT_BLACKLISTED",
    "EVT_WHITELISTED",
    "EVT_OWNERSHIP_TRANSFERRED",
    "EVT_TRANSFER",
    "EVT_APPROVAL",
    "Event",
    "CanonicalEvent",
    "EventError",
    "EventLog",
]
