# -*- coding: utf-8 -*-
"""
Property tests for the gating invariants.

- A blacklisted participant on either side blocks transfer / transfer_from and
  leaves every balance unchanged.
- While paused, every mutating operation fails with OperationPaused regardless
  of blacklist state.
- Non-owner admin calls always fail and leave the gate unchanged.
- Blacklist then whitelist restores transfer capability exactly.
- Supply invariant: sum(balances) == total_supply after any operation mix.
"""
from __future__ import annotations

from typing import Dict, List

import pytest
from hypothesis import given, settings, strategies as st

from tokengate.address import derive_account
from tokengate.config import load_config
from tokengate.errors import (BlacklistedRecipient, BlacklistedSender, InsufficientAllowance,
                              OperationPaused, TokenGateError, Unauthorized)
from tokengate.token import GatedToken

LABELS = ["owner", "a", "b", "c", "d"]
ACCTS: Dict[str, bytes] = {k: derive_account(k) for k in LABELS}
OWNER = ACCTS["owner"]
SUPPLY = 1_000_000

PARTY = st.sampled_from(LABELS[1:])
AMOUNT = st.integers(min_value=0, max_value=500)
BLACKLIST = st.sets(PARTY, max_size=4)


def _token() -> GatedToken:
    cfg = load_config(name="Prop", symbol="PROP", decimals=0, total_supply=SUPPLY)
    tok = GatedToken.create(OWNER, cfg)
    for k in LABELS[1:]:
        tok.transfer(OWNER, ACCTS[k], 1_000)
        for j in LABELS[1:]:
            if j != k:
                tok.approve(ACCTS[k], ACCTS[j], 1_000)
    return tok


def _balances(tok: GatedToken) -> Dict[str, int]:
    return {k: tok.balance_of(v) for k, v in ACCTS.items()}


@settings(max_examples=60, deadline=None)
@given(sender=PARTY, recipient=PARTY, amount=AMOUNT, blocked=BLACKLIST)
def test_blacklist_blocks_transfer(sender, recipient, amount, blocked):
    tok = _token()
    for k in blocked:
        tok.blacklist(OWNER, ACCTS[k])
    before = _balances(tok)

    if sender in blocked:
        with pytest.raises(BlacklistedSender):
            tok.transfer(ACCTS[sender], ACCTS[recipient], amount)
    elif recipient in blocked:
        with pytest.raises(BlacklistedRecipient):
            tok.transfer(ACCTS[sender], ACCTS[recipient], amount)
    else:
        assert tok.transfer(ACCTS[sender], ACCTS[recipient], amount)
        return
    assert _balances(tok) == before


@settings(max_examples=60, deadline=None)
@given(spender=PARTY, owner=PARTY, recipient=PARTY, amount=AMOUNT, blocked=BLACKLIST)
def test_blacklist_blocks_transfer_from(spender, owner, recipient, amount, blocked):
    tok = _token()
    for k in blocked:
        tok.blacklist(OWNER, ACCTS[k])
    before = _balances(tok)
    allowance = tok.allowance(ACCTS[owner], ACCTS[spender])

    if owner in blocked or recipient in blocked:
        expected = BlacklistedSender if owner in blocked else BlacklistedRecipient
        with pytest.raises(expected):
            tok.transfer_from(ACCTS[spender], ACCTS[owner], ACCTS[recipient], amount)
        assert _balances(tok) == before
        assert tok.allowance(ACCTS[owner], ACCTS[spender]) == allowance
    elif amount > allowance:
        # no self-approval: spender == owner only covers a zero amount
        with pytest.raises(InsufficientAllowance):
            tok.transfer_from(ACCTS[spender], ACCTS[owner], ACCTS[recipient], amount)
        assert _balances(tok) == before
    else:
        assert tok.transfer_from(ACCTS[spender], ACCTS[owner], ACCTS[recipient], amount)
        expected_balances = dict(before)
        expected_balances[owner] -= amount
        expected_balances[recipient] += amount
        assert _balances(tok) == expected_balances
        assert tok.allowance(ACCTS[owner], ACCTS[spender]) == allowance - amount


@settings(max_examples=40, deadline=None)
@given(who=PARTY, other=PARTY, amount=AMOUNT, blocked=BLACKLIST)
def test_pause_blocks_everything(who, other, amount, blocked):
    tok = _token()
    for k in blocked:
        tok.blacklist(OWNER, ACCTS[k])
    tok.pause(OWNER)
    before = _balances(tok)
    supply = tok.total_supply()

    ops = [
        lambda: tok.transfer(ACCTS[who], ACCTS[other], amount),
        lambda: tok.transfer_from(ACCTS[other], ACCTS[who], ACCTS[other], amount),
        lambda: tok.burn(ACCTS[who], amount),
        lambda: tok.burn_from(ACCTS[other], ACCTS[who], amount),
        lambda: tok.transfer(OWNER, ACCTS[who], amount),
        lambda: tok.burn(OWNER, amount),
    ]
    for op in ops:
        with pytest.raises(OperationPaused):
            op()
    assert _balances(tok) == before
    assert tok.total_supply() == supply


@settings(max_examples=30, deadline=None)
@given(caller=PARTY, target=PARTY, flag=st.booleans())
def test_only_owner_administers(caller, target, flag):
    tok = _token()
    before = tok.gate.dump()
    with pytest.raises(Unauthorized):
        tok.set_paused(ACCTS[caller], flag)
    with pytest.raises(Unauthorized):
        tok.set_blacklisted(ACCTS[caller], ACCTS[target], flag)
    assert tok.gate.dump() == before


@settings(max_examples=30, deadline=None)
@given(sender=PARTY, recipient=PARTY, amount=AMOUNT)
def test_blacklist_roundtrip_restores_capability(sender, recipient, amount):
    baseline = _token()
    baseline.transfer(ACCTS[sender], ACCTS[recipient], amount)

    tok = _token()
    tok.set_blacklisted(OWNER, ACCTS[sender], True)
    tok.set_blacklisted(OWNER, ACCTS[sender], False)
    tok.transfer(ACCTS[sender], ACCTS[recipient], amount)
    assert _balances(tok) == _balances(baseline)


OPS = st.lists(
    st.tuples(
        st.sampled_from(["transfer", "transfer_from", "burn", "burn_from", "pause", "unpause", "bl", "wl"]),
        PARTY,
        PARTY,
        AMOUNT,
    ),
    max_size=25,
)


@settings(max_examples=40, deadline=None)
@given(ops=OPS)
def test_supply_invariant_under_random_ops(ops: List):
    tok = _token()
    for name, x, y, amt in ops:
        a, b = ACCTS[x], ACCTS[y]
        try:
            if name == "transfer":
                tok.transfer(a, b, amt)
            elif name == "transfer_from":
                tok.transfer_from(b, a, b, amt)
            elif name == "burn":
                tok.burn(a, amt)
            elif name == "burn_from":
                tok.burn_from(b, a, amt)
            elif name == "pause":
                tok.pause(OWNER)
            elif name == "unpause":
                tok.unpause(OWNER)
            elif name == "bl":
                tok.blacklist(OWNER, a)
            else:
                tok.whitelist(OWNER, a)
        except TokenGateError:
            pass
        assert sum(_balances(tok).values()) == tok.total_supply()
