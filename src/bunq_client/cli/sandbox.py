"""CLI: bunq sandbox create-user|fund"""

import click
from rich.console import Console

from bunq_client.config import Environment
from bunq_client.models.common import Amount, Pointer
from bunq_client.sandbox import SUGAR_DADDY_EMAIL, create_sandbox_api_key

console = Console()


def _load_config() -> dict:
    from bunq_client.cli.main import _load_config
    return _load_config()


def _save_config(cfg: dict) -> None:
    from bunq_client.cli.main import _save_config
    _save_config(cfg)


def _connect():
    from bunq_client.cli.main import _connect
    return _connect()


def _run(coro):
    from bunq_client.cli.main import _run
    return _run(coro)


@click.group()
def sandbox():
    """Sandbox helpers."""


@sandbox.command("create-user")
def sandbox_create_user():
    """Create a sandbox user and save its API key."""

    async def _create():
        with console.status("Creating sandbox user..."):
            api_key = await create_sandbox_api_key()
        cfg = _load_config()
        _save_config({**cfg, "api_key": api_key, "environment": Environment.SANDBOX.name.lower()})
        console.print(f"[green]Sandbox user created, API key {api_key[:16]}...[/green]")
        console.print("[dim]Key saved to ~/.bunq/config.json[/dim]")

    _run(_create())


@sandbox.command("fund")
@click.option("--amount", default=500.0, type=float, show_default=True)
@click.option("--currency", default="EUR", show_default=True)
def sandbox_fund(amount: float, currency: str):
    """Request money from the sandbox sugar daddy into the primary account."""

    async def _fund():
        async with await _connect() as client:
            with console.status("Requesting funds..."):
                request_id = await client.request_inquiries.create({
                    "amount_inquired": Amount.of(amount, currency).model_dump(),
                    "counterparty_alias": Pointer(type="EMAIL", value=SUGAR_DADDY_EMAIL).model_dump(exclude_none=True),
                    "description": "fund sandbox account",
                    "allow_bunqme": False,
                })
            console.print(f"[green]Request inquiry {request_id} sent for {amount:.2f} {currency}.[/green]")

    _run(_fund())
