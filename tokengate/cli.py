from __future__ import annotations

"""
tokengate.cli
-------------

Devnet tool that drives a `GatedToken` persisted in a JSON state file.

Accounts may be given as ``0x``-hex or as a plain label; labels map to a
stable 20-byte account (``derive_account(label)``), so ``owner``, ``alice``
and ``bob`` are usable without any key material.

Examples
--------
python -m tokengate.cli init --owner owner
python -m tokengate.cli transfer --caller owner --to alice --amount 10
python -m tokengate.cli blacklist --caller owner --account alice
python -m tokengate.cli transfer --caller alice --to bob --amount 1   # -> exit 1
python -m tokengate.cli pause --caller owner
python -m tokengate.cli status
python -m tokengate.cli events --since 3
"""

import json
import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Optional

import typer

from .address import derive_account, to_account, to_hex
from .config import load_config
from .errors import TokenGateError
from .token import GatedToken
from .version import __version__

log = logging.getLogger(__name__)

STATE_FILE_ENV = "TOKENGATE_STATE_FILE"

app = typer.Typer(
    name="tokengate",
    add_completion=False,
    no_args_is_help=True,
    help="Pausable, blacklist-gated fixed-supply token (devnet tooling).",
)


# -------------------- helpers --------------------


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _account(value: str) -> bytes:
    """``0x``-hex is taken literally; anything else is a label."""
    if value.strip().lower().startswith("0x"):
        return to_account(value)
    return derive_account(value.strip())


def _state_path(ctx: typer.Context) -> Path:
    obj = ctx.obj or {}
    if obj.get("state_file"):
        return Path(obj["state_file"])
    return load_config().state_file


@contextmanager
def _exit_on_error():
    """Report a domain error as one stderr line and exit with code 1."""
    try:
        yield
    except TokenGateError as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(code=1)


def _load_token(path: Path) -> GatedToken:
    if not path.exists():
        typer.echo(f"No token state at {path}; run `tokengate init` first", err=True)
        raise typer.Exit(code=1)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except ValueError as e:
        typer.echo(f"Malformed state file {path}: {e}", err=True)
        raise typer.Exit(code=1)
    try:
        return GatedToken.load(data)
    except (TokenGateError, KeyError, TypeError, ValueError) as e:
        typer.echo(f"Malformed state file {path}: {e}", err=True)
        raise typer.Exit(code=1)


def _save_token(path: Path, token: GatedToken) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(token.dump(), indent=2, sort_keys=True), encoding="utf-8")
    os.replace(tmp, path)


def _mutate(ctx: typer.Context, fn) -> GatedToken:
    """Load state, apply ``fn(token)``, persist. Domain errors exit with code 1."""
    path = _state_path(ctx)
    token = _load_token(path)
    with _exit_on_error():
        fn(token)
    _save_token(path, token)
    return token


def _status(token: GatedToken) -> Dict[str, Any]:
    return {
        "name": token.name(),
        "symbol": token.symbol(),
        "decimals": token.decimals(),
        "total_supply": token.total_supply(),
        "owner": to_hex(token.owner),
        "paused": token.is_paused(),
        "blacklist": [to_hex(a) for a in token.gate.blacklisted()],
    }


# -------------------- wiring --------------------


@app.callback()
def _configure(
    ctx: typer.Context,
    state_file: Optional[Path] = typer.Option(
        None,
        "--state-file",
        help="Token state JSON (default: ~/.tokengate/state.json)",
        envvar=STATE_FILE_ENV,
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Python logging level"),
) -> None:
    _configure_logging(log_level or load_config().log_level)
    ctx.obj = {"state_file": state_file}


@app.command()
def version() -> None:
    """Print the package version."""
    typer.echo(__version__)


@app.command()
def init(
    ctx: typer.Context,
    owner: str = typer.Option(..., "--owner", help="Owner account (hex or label)"),
    name: Optional[str] = typer.Option(None, "--name"),
    symbol: Optional[str] = typer.Option(None, "--symbol"),
    decimals: Optional[int] = typer.Option(None, "--decimals"),
    supply: Optional[int] = typer.Option(None, "--supply", help="Total supply in whole tokens"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing state file"),
) -> None:
    """Create a token and mint the fixed supply to the owner."""
    path = _state_path(ctx)
    if path.exists() and not force:
        typer.echo(f"State already exists at {path}; use --force to replace", err=True)
        raise typer.Exit(code=1)
    cfg = load_config(name=name, symbol=symbol, decimals=decimals, total_supply=supply)
    with _exit_on_error():
        token = GatedToken.create(_account(owner), cfg)
    _save_token(path, token)
    typer.echo(json.dumps(_status(token), indent=2))


@app.command()
def status(ctx: typer.Context) -> None:
    """Show metadata, owner, pause flag and blacklist."""
    typer.echo(json.dumps(_status(_load_token(_state_path(ctx))), indent=2))


@app.command()
def balance(
    ctx: typer.Context,
    account: str = typer.Argument(..., help="Account (hex or label)"),
) -> None:
    """Print the balance of an account in base units."""
    token = _load_token(_state_path(ctx))
    with _exit_on_error():
        typer.echo(str(token.balance_of(_account(account))))


@app.command()
def transfer(
    ctx: typer.Context,
    caller: str = typer.Option(..., "--caller"),
    to: str = typer.Option(..., "--to"),
    amount: int = typer.Option(..., "--amount"),
) -> None:
    _mutate(ctx, lambda t: t.transfer(_account(caller), _account(to), amount))
    typer.echo("ok")


@app.command("transfer-from")
def transfer_from(
    ctx: typer.Context,
    caller: str = typer.Option(..., "--caller", help="Spender"),
    owner: str = typer.Option(..., "--from"),
    to: str = typer.Option(..., "--to"),
    amount: int = typer.Option(..., "--amount"),
) -> None:
    _mutate(ctx, lambda t: t.transfer_from(_account(caller), _account(owner), _account(to), amount))
    typer.echo("ok")


@app.command()
def approve(
    ctx: typer.Context,
    caller: str = typer.Option(..., "--caller"),
    spender: str = typer.Option(..., "--spender"),
    amount: int = typer.Option(..., "--amount"),
) -> None:
    _mutate(ctx, lambda t: t.approve(_account(caller), _account(spender), amount))
    typer.echo("ok")


@app.command()
def burn(
    ctx: typer.Context,
    caller: str = typer.Option(..., "--caller"),
    amount: int = typer.Option(..., "--amount"),
) -> None:
    _mutate(ctx, lambda t: t.burn(_account(caller), amount))
    typer.echo("ok")


@app.command("burn-from")
def burn_from(
    ctx: typer.Context,
    caller: str = typer.Option(..., "--caller"),
    account: str = typer.Option(..., "--account"),
    amount: int = typer.Option(..., "--amount"),
) -> None:
    _mutate(ctx, lambda t: t.burn_from(_account(caller), _account(account), amount))
    typer.echo("ok")


@app.command()
def pause(ctx: typer.Context, caller: str = typer.Option(..., "--caller")) -> None:
    _mutate(ctx, lambda t: t.pause(_account(caller)))
    typer.echo("paused")


@app.command()
def unpause(ctx: typer.Context, caller: str = typer.Option(..., "--caller")) -> None:
    _mutate(ctx, lambda t: t.unpause(_account(caller)))
    typer.echo("unpaused")


@app.command()
def blacklist(
    ctx: typer.Context,
    caller: str = typer.Option(..., "--caller"),
    account: str = typer.Option(..., "--account"),
) -> None:
    _mutate(ctx, lambda t: t.blacklist(_account(caller), _account(account)))
    typer.echo(f"blacklisted {to_hex(_account(account))}")


@app.command()
def whitelist(
    ctx: typer.Context,
    caller: str = typer.Option(..., "--caller"),
    account: str = typer.Option(..., "--account"),
) -> None:
    _mutate(ctx, lambda t: t.whitelist(_account(caller), _account(account)))
    typer.echo(f"whitelisted {to_hex(_account(account))}")


@app.command()
def events(
    ctx: typer.Context,
    since: int = typer.Option(0, "--since", help="First event sequence number"),
) -> None:
    """Dump emitted events in receipt form."""
    token = _load_token(_state_path(ctx))
    evs = token.events.for_receipt(token.events.since(since))
    typer.echo(json.dumps([e.to_dict() for e in evs], indent=2))


def main() -> None:  # pragma: no cover - console entry point
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
