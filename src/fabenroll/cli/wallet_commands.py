"""
Wallet CLI Commands

Commands:
    - fabenroll wallet list
    - fabenroll wallet show <label>
    - fabenroll wallet remove <label>
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

import click
from rich import box
from rich.console import Console
from rich.table import Table

from fabenroll.exceptions import WalletError
from fabenroll.wallet import FileSystemWallet, X509Identity

console = Console()
logger = logging.getLogger(__name__)

wallet_option = click.option(
    "--wallet", "wallet_path",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="FABENROLL_WALLET",
    default=None,
    help="Wallet directory. Default: ./wallet",
)


def _open(wallet_path: Path | None) -> FileSystemWallet:
    return FileSystemWallet(wallet_path or Path.cwd() / "wallet")


def _format_datetime(dt: datetime) -> str:
    return dt.strftime("%Y-%m-%d %H:%M:%S")


def _describe(label: str, identity: X509Identity) -> dict[str, Any]:
    """Public details of an identity. The private key is never included."""
    cert = identity.load_certificate()
    return {
        "label": label,
        "type": identity.type,
        "msp_id": identity.msp_id,
        "subject": cert.subject.rfc4514_string(),
        "issuer": cert.issuer.rfc4514_string(),
        "serial": format(cert.serial_number, "x"),
        "not_before": _format_datetime(cert.not_valid_before_utc),
        "not_after": _format_datetime(cert.not_valid_after_utc),
    }


def _fail(exc: Exception) -> None:
    click.echo(f"Error: {exc}", err=True)
    raise SystemExit(1)


@click.group()
def wallet() -> None:
    """Inspect and manage identities in a wallet."""


@wallet.command("list")
@wallet_option
@click.option(
    "--format", "fmt",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format.",
)
def list_identities(wallet_path: Path | None, fmt: str) -> None:
    """List identities stored in the wallet."""
    try:
        store = _open(wallet_path)
        entries = [_describe(label, store.get(label)) for label in store.list()]
    except (WalletError, ValueError) as exc:
        _fail(exc)

    if fmt == "json":
        click.echo(json.dumps(entries, indent=2))
        return

    if not entries:
        console.print(f"[yellow]No identities in {store.path}.[/yellow]")
        return

    table = Table(title=f"Wallet: {store.path}", box=box.ROUNDED)
    table.add_column("Label", style="cyan", no_wrap=True)
    table.add_column("MSP ID")
    table.add_column("Subject")
    table.add_column("Expires", style="dim")
    for entry in entries:
        table.add_row(entry["label"], entry["msp_id"], entry["subject"], entry["not_after"])
    console.print(table)


@wallet.command("show")
@click.argument("label")
@wallet_option
@click.option(
    "--format", "fmt",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format.",
)
def show_identity(label: str, wallet_path: Path | None, fmt: str) -> None:
    """Show certificate details for LABEL."""
    try:
        info = _describe(label, _open(wallet_path).get(label))
    except (WalletError, ValueError) as exc:
        _fail(exc)

    if fmt == "json":
        click.echo(json.dumps(info, indent=2))
        return

    detail = Table(box=box.SIMPLE, show_header=False)
    detail.add_column("Field", style="bold cyan", no_wrap=True)
    detail.add_column("Value")
    detail.add_row("Label", info["label"])
    detail.add_row("Type", info["type"])
    detail.add_row("MSP ID", info["msp_id"])
    detail.add_row("Subject", info["subject"])
    detail.add_row("Issuer", info["issuer"])
    detail.add_row("Serial", info["serial"])
    detail.add_row("Not Before", info["not_before"])
    detail.add_row("Not After", info["not_after"])
    console.print(detail)


@wallet.command("remove")
@click.argument("label")
@wallet_option
@click.option("--force", is_flag=True, help="Skip confirmation prompt.")
def remove_identity(label: str, wallet_path: Path | None, force: bool) -> None:
    """Delete the identity stored under LABEL."""
    try:
        store = _open(wallet_path)
        if not force and not click.confirm(
            f"Remove identity '{label}' from {store.path}?", default=False
        ):
            click.echo("Removal cancelled.")
            return
        store.remove(label)
    except WalletError as exc:
        _fail(exc)
    console.print(f"[green]✓[/green] Removed {label}")
