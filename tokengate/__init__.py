from __future__ import annotations
"""
tokengate - pausable, blacklist-gated fixed-supply token.

An `AccessGate` (owner, pause flag, blacklist) sits in front of a ledger
collaborator; `GatedToken` runs the gate checks before every transfer, delegated
transfer, burn and delegated burn.

    from tokengate import GatedToken, derive_account

    owner = derive_account("owner")
    token = GatedToken.create(owner)
    token.transfer(owner, derive_account("alice"), 10)
"""


from typing import List

from .address import NULL_ACCOUNT, derive_account, to_account, to_hex
from .config import TokenConfig, load_config
from .errors import (BlacklistedRecipient, BlacklistedSender, GateError,
                     InsufficientAllowance, InsufficientBalance, InvalidAccount,
                     InvalidAmount, LedgerError, OperationPaused, SupplyFixed,
                     TokenGateError, Unauthorized)
from .events import Event, EventLog
from .gate import AccessGate
from .ledger import Ledger, MemoryLedger
from .token import GatedToken
from .version import __version__

__all__: List[str] = [
    "__version__",
    "AccessGate",
    "GatedToken",
    "Ledger",
    "MemoryLedger",
    "Event",
    "EventLog",
    "TokenConfig",
    "load_config",
    "NULL_ACCOUNT",
    "derive_account",
    "to_account",
    "to_hex",
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
