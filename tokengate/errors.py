from __future__ import annotations
# tokengate/errors.py
"""
Error types for the gated token. They are lightweight and serializable so they
can be surfaced over logs and the CLI unchanged.

Gate failures (raised before the ledger is touched):
- Unauthorized          admin call by a non-owner
- OperationPaused       mutating call while the pause flag is set
- BlacklistedSender     sender/source account is blacklisted
- BlacklistedRecipient  recipient account is blacklisted
- InvalidAccount        empty or otherwise unusable account input

Ledger failures (raised by the ledger collaborator, passed through as-is):
- InsufficientBalance
- InsufficientAllowance
- InvalidAmount
- SupplyFixed
"""


import json
from typing import Any, Dict, Mapping, Optional


class TokenGateError(Exception):
    """Base class for all token/gate domain errors."""

    code: str = "TOKENGATE_ERROR"

    def __init__(self, message: str = "", *, details: Optional[Mapping[str, Any]] = None) -> None:
        self.message = message or self.__class__.__name__
        self.details = dict(details or {})
        super().__init__(self.__str__())

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.details:
            try:
                packed = json.dumps(self.details, sort_keys=True, separators=(",", ":"))
            except Exception:
                packed = str(self.details)
            return f"{self.code}: {self.message} [{packed}]"
        return f"{self.code}: {self.message}"


def _hex(account: Optional[bytes]) -> Optional[str]:
    if account is None:
        return None
    return "0x" + bytes(account).hex()


# ---------------------------------------------------------------------------
# Gate errors
# ---------------------------------------------------------------------------


class GateError(TokenGateError):
    """Access-control rejection raised by the gate."""

    code = "GATE_ERROR"


class Unauthorized(GateError):
    """An admin operation was invoked by an account other than the owner."""

    code = "GATE_UNAUTHORIZED"

    def __init__(
        self,
        *,
        caller: bytes,
        action: str,
        message: str = "caller is not the owner",
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        d = dict(details or {})
        d.update({"caller": _hex(caller), "action": action})
        super().__init__(message, details=d)


class OperationPaused(GateError):
    code = "GATE_PAUSED"

    def __init__(self, *, action: str, message: str = "token operations are paused") -> None:
        super().__init__(message, details={"action": action})


class BlacklistedSender(GateError):
    code = "GATE_BLACKLISTED_SENDER"

    def __init__(self, *, account: bytes, message: str = "sender is blacklisted") -> None:
        self.account = bytes(account)
        super().__init__(message, details={"account": _hex(account)})


class BlacklistedRecipient(GateError):
    code = "GATE_BLACKLISTED_RECIPIENT"

    def __init__(self, *, account: bytes, message: str = "recipient is blacklisted") -> None:
        self.account = bytes(account)
        super().__init__(message, details={"account": _hex(account)})


class InvalidAccount(GateError):
    """Account input is empty, malformed, or the null sentinel where it is not allowed."""

    code = "GATE_INVALID_ACCOUNT"

    def __init__(self, message: str = "invalid account", *, value: Any = None) -> None:
        d: Dict[str, Any] = {}
        if value is not None:
            d["value"] = _hex(value) if isinstance(value, (bytes, bytearray)) else str(value)
        super().__init__(message, details=d)


# ---------------------------------------------------------------------------
# Ledger errors
# ---------------------------------------------------------------------------


class LedgerError(TokenGateError):
    """Base error for ledger arithmetic failures."""

    code = "LEDGER_ERROR"


class InvalidAmount(LedgerError):
    code = "LEDGER_BAD_AMOUNT"

    def __init__(self, amount: Any, message: str = "amount must be an integer in [0, 2**256-1]") -> None:
        super().__init__(message, details={"amount": str(amount)})


class InsufficientBalance(LedgerError):
    code = "LEDGER_INSUFFICIENT_BALANCE"

    def __init__(self, *, account: bytes, have: int, need: int) -> None:
        super().__init__(
            "insufficient balance",
            details={"account": _hex(account), "have": int(have), "need": int(need)},
        )


class InsufficientAllowance(LedgerError):
    code = "LEDGER_ALLOWANCE_LOW"

    def __init__(self, *, owner: bytes, spender: bytes, have: int, need: int) -> None:
        super().__init__(
            "insufficient allowance",
            details={
                "owner": _hex(owner),
                "spender": _hex(spender),
                "have": int(have),
                "need": int(need),
            },
        )


class SupplyFixed(LedgerError):
    """The supply was already minted; the ledger does not allow a second mint."""

    code = "LEDGER_SUPPLY_FIXED"


__all__ = [
    "TokenGateError",
    "GateError",
    "Unauthorized",
    "OperationPaused",
    "BlacklistedSender",
    "BlacklistedRecipient",
    "InvalidAccount",
    "LedgerError",
    "InvalidAmount",
    "InsufficientBalance",
    "InsufficientAllowance",
    "SupplyFixed",
]
