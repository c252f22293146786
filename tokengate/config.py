"""
tokengate.config — token metadata, fixed supply, and tooling defaults.

This module has NO third-party deps and is safe to import very early.

Configuration precedence:
  1) Explicit overrides passed to ``load_config(**overrides)``
  2) Environment variables (TOKENGATE_*)
  3) Hardcoded defaults below

Key env vars:
  - TOKENGATE_NAME          (str)   default: "Gated Token"
  - TOKENGATE_SYMBOL        (str)   default: "GATE"
  - TOKENGATE_DECIMALS      (int)   default: 18       (clamped to 0..36)
  - TOKENGATE_TOTAL_SUPPLY  (int)   default: 100_000_000 whole tokens
  - TOKENGATE_STATE_FILE    (path)  default: ~/.tokengate/state.json
  - TOKENGATE_LOG_LEVEL     (str)   default: WARNING

Usage:
    from tokengate.config import load_config
    cfg = load_config()
    supply = cfg.supply_units
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

DEFAULT_NAME = "Gated Token"
DEFAULT_SYMBOL = "GATE"
DEFAULT_DECIMALS = 18
TOTAL_SUPPLY = 100_000_000  # whole tokens, minted once to the owner
DEFAULT_STATE_FILE = Path.home() / ".tokengate" / "state.json"
DEFAULT_LOG_LEVEL = "WARNING"

U256_MAX = 2**256 - 1


# ----------------------------- helpers ---------------------------------------


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def _env_int(name: str, default: int, *, min_v: int, max_v: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        v = int(raw.replace("_", ""), 0)
    except ValueError:
        return default
    return _clamp(v, min_v, max_v)


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if not raw:
        return default
    return Path(raw).expanduser()


def _clamp(v: int, lo: int, hi: int) -> int:
    if v < lo:
        return lo
    if v > hi:
        return hi
    return v


# ------------------------------- config --------------------------------------


@dataclass(frozen=True)
class TokenConfig:
    name: str
    symbol: str
    decimals: int
    total_supply: int  # whole tokens
    state_file: Path
    log_level: str

    @property
    def supply_units(self) -> int:
        """Total supply in base units (``total_supply * 10**decimals``)."""
        return self.total_supply * (10 ** self.decimals)

    def with_overrides(self, **overrides: Any) -> "TokenConfig":
        clean = {k: v for k, v in overrides.items() if v is not None}
        if "decimals" in clean:
            clean["decimals"] = _clamp(int(clean["decimals"]), 0, 36)
        if "symbol" in clean:
            clean["symbol"] = str(clean["symbol"]).upper()
        if "state_file" in clean:
            clean["state_file"] = Path(clean["state_file"]).expanduser()
        return replace(self, **clean)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "symbol": self.symbol,
            "decimals": self.decimals,
            "total_supply": self.total_supply,
            "state_file": str(self.state_file),
            "log_level": self.log_level,
        }


@lru_cache(maxsize=1)
def _from_env() -> TokenConfig:
    return TokenConfig(
        name=_env_str("TOKENGATE_NAME", DEFAULT_NAME),
        symbol=_env_str("TOKENGATE_SYMBOL", DEFAULT_SYMBOL).upper(),
        decimals=_env_int("TOKENGATE_DECIMALS", DEFAULT_DECIMALS, min_v=0, max_v=36),
        total_supply=_env_int("TOKENGATE_TOTAL_SUPPLY", TOTAL_SUPPLY, min_v=0, max_v=U256_MAX // 10**36),
        state_file=_env_path("TOKENGATE_STATE_FILE", DEFAULT_STATE_FILE),
        log_level=_env_str("TOKENGATE_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
    )


def load_config(**overrides: Any) -> TokenConfig:
    """
    Build a TokenConfig from environment + defaults, then apply ``overrides``
    (``None`` values are ignored so CLI options can be passed straight through).
    The environment read is cached; call ``reset_config_cache()`` after
    changing the environment in tests.
    """
    cfg = _from_env()
    return cfg.with_overrides(**overrides) if overrides else cfg


def reset_config_cache() -> None:
    _from_env.cache_clear()


__all__ = [
    "TokenConfig",
    "load_config",
    "reset_config_cache",
    "TOTAL_SUPPLY",
    "DEFAULT_DECIMALS",
    "U256_MAX",
]
