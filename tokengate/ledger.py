from __future__ import annotations

"""
tokengate.ledger — the ledger collaborator
-------------------------------------------

The gate never does balance arithmetic itself. It talks to a *ledger
collaborator* through the small `Ledger` protocol below:

    credit(account, amount)                                  -> int
    debit(account, amount)                                   -> int
    transfer_ledger(sender, recipient, amount)               -> bool
    transfer_ledger_with_allowance(spender, owner, to, amt)  -> bool
    burn_ledger(account, amount, spender=None)               -> bool
    mint(account, amount)                                    -> bool

`MemoryLedger` is the trusted in-memory implementation used by the devnet CLI
and the tests. Amounts are integer *base units* in [0, 2**256 - 1]; every
operation validates first and mutates second, so a failure leaves balances,
allowances and supply untouched.

Invariant maintained here (not by the gate): sum(balances) == total_supply.
`credit`/`debit` are the raw primitives underneath and do not touch the
supply; callers that use them directly own that invariant.

Concurrency: a coarse `threading.RLock` protects mutating methods.
"""

import logging
from threading import RLock
from typing import Any, Dict, Iterable, Mapping, Optional, Protocol, Tuple, runtime_checkable

from .address import NULL_ACCOUNT, require_account, to_account, to_hex
from .config import U256_MAX
from .errors import InsufficientAllowance, InsufficientBalance, InvalidAmount, SupplyFixed
from .events import EVT_APPROVAL, EVT_TRANSFER, EventLog

log = logging.getLogger(__name__)

Amount = int


def require_amount(n: Any) -> int:
    """Ensure ``n`` is an integer amount in [0, 2**256-1]."""
    if isinstance(n, bool) or not isinstance(n, int) or n < 0 or n > U256_MAX:
        raise InvalidAmount(n)
    return int(n)


def _safe_add(a: int, b: int) -> int:
    c = a + b
    if c > U256_MAX:
        raise InvalidAmount(c, "u256 overflow in addition")
    return c


@runtime_checkable
class Ledger(Protocol):
    """Interface consumed by `GatedToken`. Implementations own all arithmetic."""

    def credit(self, account: bytes, amount: Amount) -> Amount:
        ...

    def debit(self, account: bytes, amount: Amount) -> Amount:
        ...

    def transfer_ledger(self, sender: bytes, recipient: bytes, amount: Amount) -> bool:
        ...

    def transfer_ledger_with_allowance(
        self, spender: bytes, owner: bytes, recipient: bytes, amount: Amount
    ) -> bool:
        ...

    def burn_ledger(self, account: bytes, amount: Amount, *, spender: Optional[bytes] = None) -> bool:
        ...

    def mint(self, account: bytes, amount: Amount) -> bool:
        ...


class MemoryLedger:
    """
    In-memory fungible ledger: balances, allowances and a total supply that is
    minted exactly once.

    Storage-agnostic: call `dump()` for a JSON-friendly dict and `load()` to
    restore it.
    """

    def __init__(self, events: Optional[EventLog] = None) -> None:
        self.events = events if events is not None else EventLog()
        self._balances: Dict[bytes, Amount] = {}
        self._allowances: Dict[Tuple[bytes, bytes], Amount] = {}
        self._total: Amount = 0
        self._minted = False
        self._lock = RLock()

    # --- load/save ---

    def dump(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "total_supply": self._total,
                "minted": self._minted,
                "balances": {to_hex(k): v for k, v in sorted(self._balances.items()) if v},
                "allowances": [
                    {"owner": to_hex(o), "spender": to_hex(s), "amount": v}
                    for (o, s), v in sorted(self._allowances.items())
                    if v
                ],
            }

    @classmethod
    def load(cls, data: Mapping[str, Any], events: Optional[EventLog] = None) -> "MemoryLedger":
        led = cls(events=events)
        for k, v in data.get("balances", {}).items():
            led._balances[to_account(k)] = require_amount(int(v))
        for item in data.get("allowances", []):
            key = (to_account(item["owner"]), to_account(item["spender"]))
            led._allowances[key] = require_amount(int(item["amount"]))
        led._total = require_amount(int(data.get("total_supply", 0)))
        minted = data.get("minted", led._total > 0)
        if not isinstance(minted, bool):
            raise ValueError(f"ledger snapshot: minted must be a bool, got {minted!r}")
        led._minted = minted
        if sum(led._balances.values()) != led._total:
            raise ValueError(
                f"ledger snapshot violates supply invariant: "
                f"sum(balances)={sum(led._balances.values())} != total_supply={led._total}"
            )
        return led

    # --- views ---

    def total_supply(self) -> Amount:
        return self._total

    def balance_of(self, account: bytes) -> Amount:
        return self._balances.get(require_account(account), 0)

    def allowance(self, owner: bytes, spender: bytes) -> Amount:
        return self._allowances.get((require_account(owner), require_account(spender)), 0)

    @property
    def minted(self) -> bool:
        return self._minted

    def holders(self) -> Iterable[Tuple[bytes, Amount]]:
        return tuple((k, v) for k, v in sorted(self._balances.items()) if v)

    # --- raw primitives ---

    def credit(self, account: bytes, amount: Amount) -> Amount:
        account = require_account(account)
        amount = require_amount(amount)
        with self._lock:
            new = _safe_add(self._balances.get(account, 0), amount)
            self._balances[account] = new
            return new

    def debit(self, account: bytes, amount: Amount) -> Amount:
        account = require_account(account)
        amount = require_amount(amount)
        with self._lock:
            have = self._balances.get(account, 0)
            if have < amount:
                raise InsufficientBalance(account=account, have=have, need=amount)
            self._balances[account] = have - amount
            return have - amount

    # --- transfers ---

    def transfer_ledger(self, sender: bytes, recipient: bytes, amount: Amount) -> bool:
        sender = require_account(sender)
        recipient = require_account(recipient)
        amount = require_amount(amount)
        with self._lock:
            self._move(sender, recipient, amount)
        self.events.emit(EVT_TRANSFER, {"sender": sender, "recipient": recipient, "value": amount})
        return True

    def transfer_ledger_with_allowance(
        self, spender: bytes, owner: bytes, recipient: bytes, amount: Amount
    ) -> bool:
        """``spender`` moves ``amount`` from ``owner`` to ``recipient`` using its allowance."""
        spender = require_account(spender)
        owner = require_account(owner)
        recipient = require_account(recipient)
        amount = require_amount(amount)
        with self._lock:
            key = (owner, spender)
            allowed = self._allowances.get(key, 0)
            if allowed < amount:
                raise InsufficientAllowance(owner=owner, spender=spender, have=allowed, need=amount)
            self._move(owner, recipient, amount)
            self._allowances[key] = allowed - amount
        self.events.emit(EVT_TRANSFER, {"sender": owner, "recipient": recipient, "value": amount})
        return True

    def _move(self, sender: bytes, recipient: bytes, amount: Amount) -> None:
        # Checks for both legs run before either balance is written.
        have = self._balances.get(sender, 0)
        if have < amount:
            raise InsufficientBalance(account=sender, have=have, need=amount)
        if sender == recipient:
            return
        new_to = _safe_add(self._balances.get(recipient, 0), amount)
        self._balances[sender] = have - amount
        self._balances[recipient] = new_to

    # --- supply ---

    def mint(self, account: bytes, amount: Amount) -> bool:
        """Mint the fixed supply. Allowed exactly once per ledger."""
        account = require_account(account)
        amount = require_amount(amount)
        with self._lock:
            if self._minted:
                raise SupplyFixed("supply already minted", details={"total_supply": self._total})
            self._total = amount
            self._balances[account] = _safe_add(self._balances.get(account, 0), amount)
            self._minted = True
        log.info("minted %d units to %s", amount, to_hex(account))
        self.events.emit(EVT_TRANSFER, {"sender": NULL_ACCOUNT, "recipient": account, "value": amount})
        return True

    def burn_ledger(self, account: bytes, amount: Amount, *, spender: Optional[bytes] = None) -> bool:
        """
        Destroy ``amount`` from ``account``. When ``spender`` is given and differs
        from ``account``, the spender's allowance is deducted as well.
        """
        account = require_account(account)
        amount = require_amount(amount)
        with self._lock:
            have = self._balances.get(account, 0)
            if have < amount:
                raise InsufficientBalance(account=account, have=have, need=amount)
            if spender is not None and require_account(spender) != account:
                key = (account, bytes(spender))
                allowed = self._allowances.get(key, 0)
                if allowed < amount:
                    raise InsufficientAllowance(owner=account, spender=key[1], have=allowed, need=amount)
                self._allowances[key] = allowed - amount
            self._balances[account] = have - amount
            self._total -= amount
        self.events.emit(EVT_TRANSFER, {"sender": account, "recipient": NULL_ACCOUNT, "value": amount})
        return True

    # --- allowances ---

    def approve(self, owner: bytes, spender: bytes, amount: Amount) -> bool:
        owner = require_account(owner)
        spender = require_account(spender)
        amount = require_amount(amount)
        with self._lock:
            self._allowances[(owner, spender)] = amount
        self.events.emit(EVT_APPROVAL, {"owner": owner, "spender": spender, "value": amount})
        return True

    def increase_allowance(self, owner: bytes, spender: bytes, added: Amount) -> bool:
        owner = require_account(owner)
        spender = require_account(spender)
        added = require_amount(added)
        with self._lock:
            new = _safe_add(self._allowances.get((owner, spender), 0), added)
            self._allowances[(owner, spender)] = new
        self.events.emit(EVT_APPROVAL, {"owner": owner, "spender": spender, "value": new})
        return True

    def decrease_allowance(self, owner: bytes, spender: bytes, subtracted: Amount) -> bool:
        owner = require_account(owner)
        spender = require_account(spender)
        subtracted = require_amount(subtracted)
        with self._lock:
            cur = self._allowances.get((owner, spender), 0)
            if cur < subtracted:
                raise InsufficientAllowance(owner=owner, spender=spender, have=cur, need=subtracted)
            self._allowances[(owner, spender)] = cur - subtracted
        self.events.emit(EVT_APPROVAL, {"owner": owner, "spender": spender, "value": cur - subtracted})
        return True


__all__ = ["Amount", "Ledger", "MemoryLedger", "require_amount"]
