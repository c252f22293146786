from pathlib import Path

import pytest

from tokengate.address import derive_account, is_null, to_account, to_hex
from tokengate.config import DEFAULT_DECIMALS, TOTAL_SUPPLY, load_config, reset_config_cache
from tokengate.errors import InvalidAccount, Unauthorized
from tokengate.events import EVT_BLACKLISTED, EventError, EventLog


# ------------------------------- events ---------------------------------------


def test_event_log_sequence_and_receipt():
    log = EventLog()
    acct = derive_account("alice")
    log.emit(EVT_BLACKLISTED, {"account": acct})
    log.emit(b"Flag", {"on": True, "n": 3})

    assert [e.seq for e in log] == [0, 1]
    assert log.since(1)[0].name == b"Flag"

    receipt = log.for_receipt()
    assert receipt[0].name == "0x" + EVT_BLACKLISTED.hex()
    assert receipt[0].args == ({"k": "account", "t": "b", "v": to_hex(acct)},)
    assert receipt[1].args == ({"k": "on", "t": "z", "v": True}, {"k": "n", "t": "i", "v": 3})

    restored = EventLog.load(log.dump())
    assert restored.events == log.events


@pytest.mark.parametrize(
    "name,args",
    [
        ("Paused", {}),
        (b"", {}),
        (b"x" * 65, {}),
        (b"Ok", {"bad-key": 1}),
        (b"Ok", {"k": 1.5}),
        (b"Ok", {"k": 2**300}),
    ],
)
def test_event_validation(name, args):
    with pytest.raises(EventError):
        EventLog().emit(name, args)


# ------------------------------- addresses ------------------------------------


def test_account_normalization():
    assert to_account("0x0a0b") == b"\x0a\x0b"
    assert to_account("abc") == b"\x0a\xbc"
    assert to_account(bytearray(b"\x01")) == b"\x01"
    assert is_null(to_account("0x00"))
    assert not is_null(b"\x00\x01")
    for bad in ("", "0x", "0xzz", b"", 12):
        with pytest.raises(InvalidAccount):
            to_account(bad)  # type: ignore[arg-type]
    assert len(derive_account("owner")) == 20


# ------------------------------- errors ---------------------------------------


def test_error_to_dict():
    err = Unauthorized(caller=b"\x01", action="set_paused")
    d = err.to_dict()
    assert d["code"] == "GATE_UNAUTHORIZED"
    assert d["details"] == {"caller": "0x01", "action": "set_paused"}
    assert str(err).startswith("GATE_UNAUTHORIZED")


# ------------------------------- config ---------------------------------------


def test_config_defaults(monkeypatch):
    for k in ("TOKENGATE_NAME", "TOKENGATE_SYMBOL", "TOKENGATE_DECIMALS", "TOKENGATE_TOTAL_SUPPLY"):
        monkeypatch.delenv(k, raising=False)
    reset_config_cache()
    cfg = load_config()
    assert cfg.decimals == DEFAULT_DECIMALS
    assert cfg.total_supply == TOTAL_SUPPLY == 100_000_000
    assert cfg.supply_units == 100_000_000 * 10**18


def test_config_env_and_overrides(monkeypatch, tmp_path: Path):
    monkeypatch.setenv("TOKENGATE_SYMBOL", "abc")
    monkeypatch.setenv("TOKENGATE_DECIMALS", "99")
    monkeypatch.setenv("TOKENGATE_TOTAL_SUPPLY", "1_000")
    monkeypatch.setenv("TOKENGATE_STATE_FILE", str(tmp_path / "s.json"))
    reset_config_cache()
    cfg = load_config()
    assert cfg.symbol == "ABC"
    assert cfg.decimals == 36
    assert cfg.total_supply == 1_000
    assert cfg.state_file == tmp_path / "s.json"

    cfg2 = load_config(decimals=2, name=None)
    assert cfg2.decimals == 2
    assert cfg2.name == cfg.name
    assert cfg2.supply_units == 100_000
