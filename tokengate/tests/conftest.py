# -*- coding: utf-8 -*-
"""
Shared fixtures for the tokengate tests.

- Deterministic 20-byte accounts derived from labels (owner/alice/bob/mallory).
- A fresh `GatedToken` per test with decimals=0 so amounts read as whole tokens
  and the owner holds exactly 100,000,000 units.
- Config cache reset around each test so env monkeypatching is honoured.
"""
from __future__ import annotations

from typing import Dict

import pytest

from tokengate.address import derive_account
from tokengate.config import load_config, reset_config_cache
from tokengate.token import GatedToken

SUPPLY = 100_000_000


@pytest.fixture(autouse=True)
def _fresh_config():
    reset_config_cache()
    yield
    reset_config_cache()


@pytest.fixture(scope="session")
def accounts() -> Dict[str, bytes]:
    return {tag: derive_account(tag) for tag in ("owner", "alice", "bob", "carol", "mallory")}


@pytest.fixture
def owner(accounts) -> bytes:
    return accounts["owner"]


@pytest.fixture
def token(owner) -> GatedToken:
    cfg = load_config(name="Test Token", symbol="tst", decimals=0, total_supply=SUPPLY)
    return GatedToken.create(owner, cfg)


@pytest.fixture
def funded(token, owner, accounts) -> GatedToken:
    """Token where alice and bob each hold 1,000 units."""
    token.transfer(owner, accounts["alice"], 1_000)
    token.transfer(owner, accounts["bob"], 1_000)
    return token
