"""
fabenroll CLI

Commands:
    - fabenroll enroll-admin      Enroll the administrator into the wallet
    - fabenroll wallet list       List wallet identities
    - fabenroll wallet show       Show one identity's certificate details
    - fabenroll wallet remove     Delete an identity
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import click
from pydantic import ValidationError
from rich.console import Console

from fabenroll import __version__
from fabenroll.cli.wallet_commands import wallet
from fabenroll.enroll import EnrollOutcome, EnrollSettings, enroll_admin
from fabenroll.exceptions import FabEnrollError

console = Console()
logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


@click.group()
@click.version_option(__version__, prog_name="fabenroll")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    envvar="FABENROLL_LOG_LEVEL",
    show_default=True,
    help="Logging verbosity (logs go to stderr).",
)
def app(log_level: str) -> None:
    """fabenroll - enroll ledger administrators with their certificate authority.

    Reads a network profile, enrolls the administrator identity with the
    organization's CA, and stores the credential in a local wallet.
    """
    _configure_logging(log_level)


@app.command("enroll-admin")
@click.option(
    "--profile", "profile_path",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="FABENROLL_PROFILE",
    default=None,
    help="Network profile (JSON or YAML). Default: connection-Manufacturer.json",
)
@click.option(
    "--ca", "ca_name",
    envvar="FABENROLL_CA",
    default=None,
    help="certificateAuthorities key in the profile. Default: ca.Manufacturer.example.com",
)
@click.option(
    "--tls-base-dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="FABENROLL_TLS_BASE_DIR",
    default=None,
    help="Directory relative tlsCACerts paths are resolved against (default: profile dir).",
)
@click.option(
    "--wallet", "wallet_path",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="FABENROLL_WALLET",
    default=None,
    help="Wallet directory. Default: ./wallet",
)
@click.option("--label", envvar="FABENROLL_LABEL", default=None, help="Wallet label. Default: admin")
@click.option(
    "--enrollment-id", envvar="FABENROLL_ENROLLMENT_ID", default=None,
    help="Registered enrollment id. Default: admin",
)
@click.option(
    "--enrollment-secret", envvar="FABENROLL_ENROLLMENT_SECRET", default=None,
    help="Enrollment secret. Default: adminpw",
)
@click.option(
    "--msp-id", envvar="FABENROLL_MSP_ID", default=None,
    help="MSP label stamped on the identity. Default: ManufacturerMSP",
)
@click.option(
    "--verify/--no-verify", "verify_tls",
    default=None,
    help="Verify the CA's TLS certificate (default: profile httpOptions.verify).",
)
@click.option(
    "--timeout", "timeout_seconds",
    type=float, envvar="FABENROLL_TIMEOUT", default=None,
    help="CA request timeout in seconds. Default: 30",
)
@click.option("--json", "json_flag", is_flag=True, help="Print the result as JSON.")
def enroll_admin_command(json_flag: bool, **options: Any) -> None:
    """Enroll the administrator and import it into the wallet.

    Does nothing if the wallet already holds the label.
    """
    overrides = {k: v for k, v in options.items() if v is not None}
    label = overrides.get("label", "admin")

    try:
        settings = EnrollSettings(**overrides)
        result = enroll_admin(settings)
    except (FabEnrollError, ValidationError) as exc:
        logger.debug("Enrollment failed", exc_info=True)
        click.echo(f'Failed to enroll admin user "{label}": {exc}', err=True)
        raise SystemExit(1)

    if json_flag:
        click.echo(json.dumps({
            "outcome": result.outcome.value,
            "label": result.label,
            "msp_id": result.msp_id,
            "wallet_path": str(result.wallet_path) if result.wallet_path else None,
        }, indent=2))
        return

    if result.outcome is EnrollOutcome.ALREADY_ENROLLED:
        console.print(
            f'[yellow]An identity for the admin user "{result.label}" '
            f"already exists in the wallet[/yellow]"
        )
    else:
        console.print(
            f'[green]✓[/green] Successfully enrolled admin user "{result.label}" '
            f"and imported it into the wallet"
        )
    console.print(f"  Wallet: {result.wallet_path}", highlight=False)


app.add_command(wallet)


def main(argv: Optional[list[str]] = None) -> None:
    """Console script entry point."""
    app.main(args=argv, prog_name="fabenroll")


if __name__ == "__main__":
    main()
