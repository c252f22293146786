# -*- coding: utf-8 -*-
"""
tokengate.gate
==============

Owner-administered **pause switch** and **account blacklist**, plus the two
predicates every balance-mutating token call runs before touching the ledger.

State
-----
- paused flag: single boolean, default ``False``.
- blacklist:   set of accounts, default membership ``False``; no expiry.
- owner:       single account fixed at construction (see `transfer_ownership`).

Both pieces of state live on the `AccessGate` instance and are guarded by one
``threading.RLock``; `GatedToken` holds the same lock across check + ledger
call so a check never observes a half-applied admin update.

Admin API (owner only, otherwise `Unauthorized`)
------------------------------------------------
- ``set_paused(caller, flag)``               emits ``Paused`` / ``Unpaused``
- ``set_blacklisted(caller, account, flag)`` emits ``Blacklisted`` / ``Whitelisted``
- ``transfer_ownership(caller, new_owner)``  emits ``OwnershipTransferred``

Admin calls are idempotent: setting the current value again succeeds and
re-emits the event.

Checks
------
- ``check_not_paused(action)``               -> `OperationPaused`
- ``check_participants(sender, recipient)``  -> `BlacklistedSender` /
  `BlacklistedRecipient`

The null sentinel (burn destination) is never blacklisted: the lookup always
answers ``False`` for it and the admin API refuses it as input.

Usage
-----
    gate = AccessGate(owner)
    gate.set_blacklisted(owner, mallory, True)
    with gate.locked():
        gate.check_not_paused("transfer")
        gate.check_participants(sender, recipient)
        ...  # ledger call
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from threading import RLock
from typing import Any, Dict, Iterator, List, Mapping, Optional, Set

from .address import is_null, require_account, to_account, to_hex
from .errors import (BlacklistedRecipient, BlacklistedSender, InvalidAccount,
                     OperationPaused, Unauthorized)
from .events import (EVT_BLACKLISTED, EVT_OWNERSHIP_TRANSFERRED, EVT_PAUSED,
                     EVT_UNPAUSED, EVT_WHITELISTED, EventLog)

log = logging.getLogger(__name__)

__all__ = ["AccessGate"]


class AccessGate:
    def __init__(self, owner: bytes, *, events: Optional[EventLog] = None) -> None:
        owner = require_account(owner)
        if is_null(owner):
            raise InvalidAccount("owner cannot be the null account", value=owner)
        self._owner = owner
        self._paused = False
        self._blacklist: Set[bytes] = set()
        self._lock = RLock()
        self.events = events if events is not None else EventLog()

    # ---- load/save -----------------------------------------------------------

    def dump(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "owner": to_hex(self._owner),
                "paused": self._paused,
                "blacklist": sorted(to_hex(a) for a in self._blacklist),
            }

    @classmethod
    def load(cls, data: Mapping[str, Any], *, events: Optional[EventLog] = None) -> "AccessGate":
        gate = cls(to_account(data["owner"]), events=events)
        paused = data.get("paused", False)
        if not isinstance(paused, bool):
            raise ValueError(f"gate snapshot: paused must be a bool, got {paused!r}")
        gate._paused = paused
        for a in data.get("blacklist", []):
            acct = to_account(a)
            if not is_null(acct):
                gate._blacklist.add(acct)
        return gate

    # ---- views ---------------------------------------------------------------

    @property
    def owner(self) -> bytes:
        return self._owner

    @contextmanager
    def locked(self) -> Iterator["AccessGate"]:
        """Hold the gate lock; admin updates cannot interleave with the block."""
        with self._lock:
            yield self

    def is_paused(self) -> bool:
        return self._paused

    def is_blacklisted(self, account: bytes) -> bool:
        account = require_account(account)
        if is_null(account):
            return False
        return account in self._blacklist

    def blacklisted(self) -> List[bytes]:
        with self._lock:
            return sorted(self._blacklist)

    # ---- admin ---------------------------------------------------------------

    def _require_owner(self, caller: bytes, action: str) -> None:
        caller = require_account(caller)
        if caller != self._owner:
            log.debug("rejected %s from non-owner %s", action, to_hex(caller))
            raise Unauthorized(caller=caller, action=action)

    def set_paused(self, caller: bytes, flag: bool) -> None:
        """Set the global pause flag. Owner only; re-setting the current value re-emits."""
        with self._lock:
            self._require_owner(caller, "set_paused")
            self._paused = bool(flag)
            self.events.emit(EVT_PAUSED if flag else EVT_UNPAUSED, {"sender": bytes(caller)})
        log.info("token %s by %s", "paused" if flag else "unpaused", to_hex(caller))

    def pause(self, caller: bytes) -> None:
        self.set_paused(caller, True)

    def unpause(self, caller: bytes) -> None:
        self.set_paused(caller, False)

    def set_blacklisted(self, caller: bytes, account: bytes, flag: bool) -> None:
        """
        Add (``flag=True``) or remove ``account`` from the blacklist. Owner only.
        The null sentinel is refused with `InvalidAccount`.
        """
        with self._lock:
            self._require_owner(caller, "set_blacklisted")
            account = require_account(account)
            if is_null(account):
                raise InvalidAccount("the null account cannot be blacklisted", value=account)
            if flag:
                self._blacklist.add(account)
            else:
                self._blacklist.discard(account)
            self.events.emit(EVT_BLACKLISTED if flag else EVT_WHITELISTED, {"account": account})
        log.info("%s %s", "blacklisted" if flag else "whitelisted", to_hex(account))

    def blacklist(self, caller: bytes, account: bytes) -> None:
        self.set_blacklisted(caller, account, True)

    def whitelist(self, caller: bytes, account: bytes) -> None:
        self.set_blacklisted(caller, account, False)

    def transfer_ownership(self, caller: bytes, new_owner: bytes) -> None:
        """Owner only: hand the admin role to ``new_owner`` (non-empty, not null)."""
        with self._lock:
            self._require_owner(caller, "transfer_ownership")
            new_owner = require_account(new_owner)
            if is_null(new_owner):
                raise InvalidAccount("new owner cannot be the null account", value=new_owner)
            previous = self._owner
            self._owner = new_owner
            self.events.emit(EVT_OWNERSHIP_TRANSFERRED, {"previous": previous, "new": new_owner})
        log.info("ownership transferred %s -> %s", to_hex(previous), to_hex(new_owner))

    # ---- checks --------------------------------------------------------------

    def check_not_paused(self, action: str = "transfer") -> None:
        if self._paused:
            log.debug("rejected %s: paused", action)
            raise OperationPaused(action=action)

    def check_participants(self, sender: bytes, recipient: Optional[bytes] = None) -> None:
        """
        Reject if ``sender`` is blacklisted, then if ``recipient`` (when given)
        is blacklisted. Burns pass ``None`` or the null sentinel as recipient.
        """
        with self._lock:
            if self.is_blacklisted(sender):
                log.debug("rejected: sender %s blacklisted", to_hex(sender))
                raise BlacklistedSender(account=sender)
            if recipient is not None and self.is_blacklisted(recipient):
                log.debug("rejected: recipient %s blacklisted", to_hex(recipient))
                raise BlacklistedRecipient(account=recipient)
