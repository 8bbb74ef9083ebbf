"""CLI: bunq accounts list, bunq payments list"""

import json
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from bunq_client.models.common import Amount

console = Console()


def _connect():
    from bunq_client.cli.main import _connect
    return _connect()


def _run(coro):
    from bunq_client.cli.main import _run
    return _run(coro)


def _amount(raw: Optional[dict]) -> str:
    if not raw:
        return "n/a"
    amount = Amount.model_validate(raw)
    try:
        return f"{amount.as_float():.2f} {amount.currency}"
    except ValueError:
        return f"{amount.value} {amount.currency}"


@click.group()
def accounts():
    """Monetary accounts."""


@accounts.command("list")
@click.option("--json-output", "--json", is_flag=True)
def accounts_list(json_output):
    """List monetary accounts."""

    async def _list():
        async with await _connect() as client:
            items = [item async for item in client.monetary_accounts.list()]
            if json_output:
                click.echo(json.dumps(items, indent=2))
                return
            table = Table(title=f"Monetary accounts (primary {client.primary_monetary_account_id})")
            table.add_column("ID", style="bold")
            table.add_column("Status")
            table.add_column("Description")
            table.add_column("Balance", justify="right")
            for a in items:
                table.add_row(str(a.get("id")), a.get("status", ""), a.get("description", ""), _amount(a.get("balance")))
            console.print(table)

    _run(_list())


@click.group()
def payments():
    """Payments."""


@payments.command("list")
@click.option("--account", "account_id", default=None, type=int, help="Monetary account id (default: primary)")
@click.option("--limit", default=20, type=int)
@click.option("--json-output", "--json", is_flag=True)
def payments_list(account_id, limit, json_output):
    """List the most recent payments."""

    async def _list():
        async with await _connect() as client:
            items = []
            async for payment in client.payments.list(account_id):
                items.append(payment)
                if len(items) >= limit:
                    break
            if json_output:
                click.echo(json.dumps(items, indent=2))
                return
            table = Table(title=f"Payments ({len(items)} shown)")
            table.add_column("ID", style="bold")
            table.add_column("Created")
            table.add_column("Amount", justify="right")
            table.add_column("Description")
            for p in items:
                table.add_row(str(p.get("id")), p.get("created", ""), _amount(p.get("amount")), p.get("description", ""))
            console.print(table)

    _run(_list())
