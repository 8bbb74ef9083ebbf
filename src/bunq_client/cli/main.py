"""
bunq CLI: `bunq` command.

Commands:
  bunq sandbox create-user   Create a sandbox user and save its API key
  bunq sandbox fund          Ask the sandbox sugar daddy for money
  bunq accounts list         List monetary accounts
  bunq payments list         List payments of an account
"""

import asyncio
import json
import logging
import os
from pathlib import Path

try:
    import click
    from rich.console import Console
    from rich.logging import RichHandler
except ImportError:
    raise SystemExit("CLI requires extras: pip install bunq-client[cli]")

from bunq_client.client import AsyncBunq
from bunq_client.config import BunqConfig, Environment
from bunq_client.errors import BunqError

console = Console()
CONFIG_FILE = Path.home() / ".bunq" / "config.json"


def _load_config() -> dict:
    try:
        return json.loads(CONFIG_FILE.read_text())
    except (FileNotFoundError, json.JSONDecodeError):
        return {}


def _save_config(cfg: dict) -> None:
    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    CONFIG_FILE.write_text(json.dumps(cfg, indent=2))


def _client_config() -> BunqConfig:
    cfg = _load_config()
    api_key = os.environ.get("BUNQ_API_KEY") or cfg.get("api_key")
    if not api_key:
        console.print("[red]No API key. Set BUNQ_API_KEY or run `bunq sandbox create-user`.[/red]")
        raise SystemExit(1)
    environment = os.environ.get("BUNQ_ENVIRONMENT") or cfg.get("environment", "production")
    return BunqConfig(api_key=api_key, environment=Environment.from_name(environment))


async def _connect() -> AsyncBunq:
    with console.status("Opening bunq session..."):
        return await AsyncBunq.create(_client_config())


def _run(coro):
    try:
        return asyncio.run(coro)
    except BunqError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)


@click.group()
@click.version_option("0.1.0")
@click.option("-v", "--verbose", is_flag=True, help="Log requests and session activity")
def main(verbose: bool):
    """bunq CLI: talk to the bunq API from your terminal."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(message)s", handlers=[RichHandler(console=console)],
        )


# Register subcommands from separate modules
from bunq_client.cli.accounts import accounts, payments
from bunq_client.cli.sandbox import sandbox

main.add_command(sandbox)
main.add_command(accounts)
main.add_command(payments)


if __name__ == "__main__":
    main()
