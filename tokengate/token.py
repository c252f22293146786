# -*- coding: utf-8 -*-
"""
Gated fixed-supply token
========================

`GatedToken` is the call-through layer between callers and the ledger
collaborator. Every balance-mutating entry point runs the gate first:

    check_not_paused()  ->  check_participants(sender, recipient)  ->  ledger

and both checks plus the ledger call happen under the gate lock, so a call
either completes fully or fails with nothing written.

Public interface
----------------
# metadata / views (pure)
name() -> str, symbol() -> str, decimals() -> int
total_supply() -> int, balance_of(addr) -> int, allowance(owner, spender) -> int
is_paused() -> bool, is_blacklisted(addr) -> bool, owner -> bytes

# gated mutations (explicit caller)
transfer(caller, to, amount) -> bool
transfer_from(caller, owner, to, amount) -> bool      # caller = spender, not checked
burn(caller, amount) -> bool
burn_from(caller, account, amount) -> bool            # caller's allowance is spent

# allowance management (not gated)
approve / increase_allowance / decrease_allowance

# admin (owner only, delegated to the gate)
set_paused, pause, unpause, set_blacklisted, blacklist, whitelist,
transfer_ownership

Notes
-----
- Addresses are raw `bytes`; hex is handled at the CLI edge.
- The pause check runs before the blacklist check, so a paused token reports
  `OperationPaused` even for blacklisted participants.
- Ledger errors (insufficient balance/allowance, bad amount) pass through.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from .address import require_account, to_hex
from .config import TokenConfig, load_config
from .events import EventLog
from .gate import AccessGate
from .ledger import Ledger, MemoryLedger

log = logging.getLogger(__name__)


class GatedToken:
    def __init__(
        self,
        gate: AccessGate,
        ledger: Ledger,
        *,
        name: str,
        symbol: str,
        decimals: int,
        events: Optional[EventLog] = None,
    ) -> None:
        self.gate = gate
        self.ledger = ledger
        self._name = name
        self._symbol = symbol
        self._decimals = decimals
        self.events = events if events is not None else gate.events

    @classmethod
    def create(cls, owner: bytes, config: Optional[TokenConfig] = None) -> "GatedToken":
        """
        Build a fresh token: one shared event log, a `MemoryLedger`, an
        `AccessGate` owned by ``owner``, and the whole fixed supply minted to
        ``owner``.
        """
        cfg = config or load_config()
        owner = require_account(owner)
        events = EventLog()
        gate = AccessGate(owner, events=events)
        ledger = MemoryLedger(events=events)
        ledger.mint(owner, cfg.supply_units)
        log.info("created %s (%s) supply=%d owner=%s", cfg.name, cfg.symbol, cfg.supply_units, to_hex(owner))
        return cls(gate, ledger, name=cfg.name, symbol=cfg.symbol, decimals=cfg.decimals, events=events)

    # ------------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------------

    def dump(self) -> Dict[str, Any]:
        if not isinstance(self.ledger, MemoryLedger):
            raise TypeError("only MemoryLedger-backed tokens can be snapshotted")
        with self.gate.locked():
            return {
                "meta": {"name": self._name, "symbol": self._symbol, "decimals": self._decimals},
                "gate": self.gate.dump(),
                "ledger": self.ledger.dump(),
                "events": self.events.dump(),
            }

    @classmethod
    def load(cls, data: Mapping[str, Any]) -> "GatedToken":
        events = EventLog.load(data.get("events", []))
        gate = AccessGate.load(data["gate"], events=events)
        ledger = MemoryLedger.load(data["ledger"], events=events)
        meta = data.get("meta", {})
        return cls(
            gate,
            ledger,
            name=str(meta.get("name", "")),
            symbol=str(meta.get("symbol", "")),
            decimals=int(meta.get("decimals", 0)),
            events=events,
        )

    # ------------------------------------------------------------------------
    # Metadata / views
    # ------------------------------------------------------------------------

    def name(self) -> str:
        return self._name

    def symbol(self) -> str:
        return self._symbol

    def decimals(self) -> int:
        return self._decimals

    def total_supply(self) -> int:
        return self.ledger.total_supply()  # type: ignore[attr-defined]

    def balance_of(self, account: bytes) -> int:
        return self.ledger.balance_of(account)  # type: ignore[attr-defined]

    def allowance(self, owner: bytes, spender: bytes) -> int:
        return self.ledger.allowance(owner, spender)  # type: ignore[attr-defined]

    @property
    def owner(self) -> bytes:
        return self.gate.owner

    def is_paused(self) -> bool:
        return self.gate.is_paused()

    def is_blacklisted(self, account: bytes) -> bool:
        return self.gate.is_blacklisted(account)

    # ------------------------------------------------------------------------
    # Gated mutations
    # ------------------------------------------------------------------------

    def transfer(self, caller: bytes, to: bytes, amount: int) -> bool:
        with self.gate.locked():
            self.gate.check_not_paused("transfer")
            self.gate.check_participants(caller, to)
            return self.ledger.transfer_ledger(caller, to, amount)

    def transfer_from(self, caller: bytes, owner: bytes, to: bytes, amount: int) -> bool:
        """
        Spender (``caller``) moves ``amount`` from ``owner`` to ``to`` using its
        allowance. Only ``owner`` and ``to`` are blacklist-checked.
        """
        with self.gate.locked():
            self.gate.check_not_paused("transfer_from")
            self.gate.check_participants(owner, to)
            return self.ledger.transfer_ledger_with_allowance(caller, owner, to, amount)

    def burn(self, caller: bytes, amount: int) -> bool:
        """Holder burns their own tokens; total supply drops by ``amount``."""
        with self.gate.locked():
            self.gate.check_not_paused("burn")
            self.gate.check_participants(caller, None)
            return self.ledger.burn_ledger(caller, amount)

    def burn_from(self, caller: bytes, account: bytes, amount: int) -> bool:
        """
        Burn ``amount`` from ``account``. Only ``account`` is blacklist-checked;
        the ledger deducts ``caller``'s allowance when it is not the holder.
        """
        with self.gate.locked():
            self.gate.check_not_paused("burn_from")
            self.gate.check_participants(account, None)
            return self.ledger.burn_ledger(account, amount, spender=caller)

    # ------------------------------------------------------------------------
    # Allowances (not gated)
    # ------------------------------------------------------------------------

    def approve(self, caller: bytes, spender: bytes, amount: int) -> bool:
        return self.ledger.approve(caller, spender, amount)  # type: ignore[attr-defined]

    def increase_allowance(self, caller: bytes, spender: bytes, added: int) -> bool:
        return self.ledger.increase_allowance(caller, spender, added)  # type: ignore[attr-defined]

    def decrease_allowance(self, caller: bytes, spender: bytes, subtracted: int) -> bool:
        return self.ledger.decrease_allowance(caller, spender, subtracted)  # type: ignore[attr-defined]

    # ------------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------------

    def set_paused(self, caller: bytes, flag: bool) -> None:
        self.gate.set_paused(caller, flag)

    def pause(self, caller: bytes) -> None:
        self.gate.pause(caller)

    def unpause(self, caller: bytes) -> None:
        self.gate.unpause(caller)

    def set_blacklisted(self, caller: bytes, account: bytes, flag: bool) -> None:
        self.gate.set_blacklisted(caller, account, flag)

    def blacklist(self, caller: bytes, account: bytes) -> None:
        self.gate.blacklist(caller, account)

    def whitelist(self, caller: bytes, account: bytes) -> None:
        self.gate.whitelist(caller, account)

    def transfer_ownership(self, caller: bytes, new_owner: bytes) -> None:
        self.gate.transfer_ownership(caller, new_owner)


__all__ = ["GatedToken"]
