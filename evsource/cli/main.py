#!/usr/bin/env python3
"""
evsource CLI - event-sourced account engine

Each invocation recovers the entity from the JSONL event log, submits at most
one command and exits, so every run exercises recovery.
"""

import json
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

import typer
from rich.console import Console
from rich.table import Table

from .. import __version__
from ..account import (
    CloseAccount,
    Confirmed,
    CreateAccount,
    CurrentBalance,
    Deposit,
    GetBalance,
    Rejected,
    Withdraw,
    account_behavior,
    account_codec,
)
from ..config import EngineConfig
from ..core.canonical import decimal_to_str
from ..core.commands import ReplyBox
from ..core.errors import EngineError
from ..engine import AggregateEngine
from ..log.file_store import FileEventLog
from ..logging_config import setup_logging
from ..replay.runner import compute_state_hash, replay

app = typer.Typer(
    name="evsource",
    help="Event-sourced account engine CLI",
    add_completion=False,
)
account_app = typer.Typer(help="Submit account commands")
log_app = typer.Typer(help="Event log operations")
app.add_typer(account_app, name="account")
app.add_typer(log_app, name="log")

console = Console()
err_console = Console(stderr=True)

LOG_OPTION = typer.Option(None, "--log", "-l", help="Path to event log file (default: EVSOURCE_LOG_PATH)")


@app.callback()
def main_callback(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING, ERROR"),
    log_format: str = typer.Option("text", "--log-format", help="json or text"),
):
    setup_logging(level=log_level or "WARNING", log_format=log_format)


def _config(log_path: Optional[str]) -> EngineConfig:
    config = EngineConfig.from_env()
    if log_path:
        config = EngineConfig(
            log_path=log_path,
            unhandled_policy=config.unhandled_policy,
            closed_policy=config.closed_policy,
        )
    return config


def _engine(config: EngineConfig) -> AggregateEngine:
    log = FileEventLog(config.log_path, account_codec())
    return AggregateEngine(
        account_behavior(config.closed_policy),
        log,
        unhandled_policy=config.unhandled_policy,
    )


def _amount(text: str) -> Decimal:
    try:
        value = Decimal(text)
    except InvalidOperation:
        raise typer.BadParameter(f"not a decimal amount: {text}")
    if not value.is_finite():
        raise typer.BadParameter(f"not a finite amount: {text}")
    return value


def _reply_dict(value: Any) -> Dict[str, Any]:
    if isinstance(value, Confirmed):
        return {"reply": "Confirmed"}
    if isinstance(value, Rejected):
        return {"reply": "Rejected", "reason": value.reason}
    if isinstance(value, CurrentBalance):
        return {"reply": "CurrentBalance", "balance": decimal_to_str(value.balance)}
    return {"reply": type(value).__name__}


def _submit(account_id: str, make_command, log_path: Optional[str], json_output: bool) -> None:
    box = ReplyBox()
    try:
        engine = _engine(_config(log_path))
        handle = engine.activate(account_id)
        outcome = engine.submit(handle, make_command(box))
    except (EngineError, ValueError) as e:
        if json_output:
            print(json.dumps({"error": str(e)}))
        else:
            err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(2)

    if not outcome.replied:
        if json_output:
            print(json.dumps({"account": account_id, "reply": None, "unhandled": True}))
        else:
            console.print(f"[yellow]Command not handled for account {account_id}[/yellow]")
        raise typer.Exit(1)

    out = _reply_dict(box.reply)
    if json_output:
        out["account"] = account_id
        out["state"] = handle.state.to_dict()
        print(json.dumps(out, sort_keys=True))
    elif isinstance(box.reply, Rejected):
        console.print(f"[red]✗ Rejected:[/red] {box.reply.reason}")
    elif isinstance(box.reply, CurrentBalance):
        console.print(f"Balance: [cyan]{decimal_to_str(box.reply.balance)}[/cyan]")
    else:
        console.print("[green]✓ Confirmed[/green]")

    if isinstance(box.reply, Rejected):
        raise typer.Exit(1)


@account_app.command("create")
def create_command(
    account_id: str = typer.Argument(..., help="Account identifier"),
    log_path: Optional[str] = LOG_OPTION,
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Open a new account."""
    _submit(account_id, lambda box: CreateAccount(reply_to=box), log_path, json_output)


@account_app.command("deposit")
def deposit_command(
    account_id: str = typer.Argument(..., help="Account identifier"),
    amount: str = typer.Argument(..., help="Amount to deposit"),
    log_path: Optional[str] = LOG_OPTION,
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Deposit money into an account."""
    value = _amount(amount)
    _submit(account_id, lambda box: Deposit(value, reply_to=box), log_path, json_output)


@account_app.command("withdraw")
def withdraw_command(
    account_id: str = typer.Argument(..., help="Account identifier"),
    amount: str = typer.Argument(..., help="Amount to withdraw"),
    log_path: Optional[str] = LOG_OPTION,
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Withdraw money from an account."""
    value = _amount(amount)
    _submit(account_id, lambda box: Withdraw(value, reply_to=box), log_path, json_output)


@account_app.command("balance")
def balance_command(
    account_id: str = typer.Argument(..., help="Account identifier"),
    log_path: Optional[str] = LOG_OPTION,
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Show the current balance."""
    _submit(account_id, lambda box: GetBalance(reply_to=box), log_path, json_output)


@account_app.command("close")
def close_command(
    account_id: str = typer.Argument(..., help="Account identifier"),
    log_path: Optional[str] = LOG_OPTION,
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Close an account with zero balance."""
    _submit(account_id, lambda box: CloseAccount(reply_to=box), log_path, json_output)


@app.command("replay")
def replay_command(
    account_id: str = typer.Argument(..., help="Account identifier"),
    log_path: Optional[str] = LOG_OPTION,
    until: Optional[int] = typer.Option(None, "--until", "-u", help="Replay until sequence number"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Replay an account's events and show the reconstructed state.

    Examples:
        evsource replay acc-1
        evsource replay acc-1 --until 10 --json
    """
    config = _config(log_path)
    try:
        log = FileEventLog(config.log_path, account_codec())
        result = replay(log, account_behavior(config.closed_policy), account_id, to_seq=until)
    except EngineError as e:
        if json_output:
            print(json.dumps({"error": str(e)}))
        else:
            err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(2)

    state_hash = compute_state_hash(result.state)
    if json_output:
        print(json.dumps({
            "account": account_id,
            "events_replayed": result.applied,
            "last_seq": result.last_seq,
            "state": result.state.to_dict(),
            "state_hash": state_hash,
        }, sort_keys=True))
        return

    console.print(f"[green]✓ Replayed {result.applied} events[/green]")
    table = Table(show_header=False, box=None)
    for key, value in sorted(result.state.to_dict().items()):
        table.add_row(f"[bold]{key}[/bold]", str(value))
    table.add_row("[bold]state_hash[/bold]", f"[yellow]{state_hash}[/yellow]")
    console.print(table)


@log_app.command("tail")
def tail_command(
    log_path: Optional[str] = LOG_OPTION,
    lines: Optional[int] = typer.Option(None, "--lines", "-n", help="Number of records to show"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Show the most recent event log records."""
    config = _config(log_path)
    records = FileEventLog(config.log_path, account_codec()).raw_records()
    if lines:
        records = records[-lines:]

    if json_output:
        print(json.dumps({"events": records, "count": len(records)}, sort_keys=True))
        return

    if not records:
        console.print("[yellow]Event log is empty[/yellow]")
        return

    table = Table(title=f"Event Log: {config.log_path}")
    table.add_column("Seq", style="cyan", justify="right")
    table.add_column("Entity", style="yellow")
    table.add_column("Type", style="green")
    table.add_column("Payload")
    table.add_column("Hash (prefix)", style="dim")
    for rec in records:
        ev = rec["event"]
        table.add_row(
            str(ev["seq"]),
            ev["entity_id"],
            ev["type"],
            json.dumps(ev.get("payload", {}), sort_keys=True),
            rec["event_hash"][:16],
        )
    console.print(table)
    console.print(f"\n[bold]Total events:[/bold] {len(records)}")


@log_app.command("verify")
def verify_command(
    log_path: Optional[str] = LOG_OPTION,
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Verify the event log hash chain."""
    config = _config(log_path)
    try:
        count = FileEventLog(config.log_path, account_codec()).verify_chain()
    except EngineError as e:
        if json_output:
            print(json.dumps({"valid": False, "error": str(e)}))
        else:
            console.print(f"[red]✗ Hash chain invalid:[/red] {e}")
        raise typer.Exit(1)

    if json_output:
        print(json.dumps({"valid": True, "records": count}))
    else:
        console.print(f"[green]✓ Hash chain valid ({count} records)[/green]")


@app.command()
def version():
    """Show version information."""
    table = Table(show_header=False, box=None)
    table.add_row("[bold]evsource[/bold]", f"v{__version__}")
    console.print(table)


def main():
    """Main entrypoint."""
    app()


if __name__ == "__main__":
    main()
