"""CLI: usbmkt config show|set-url"""

import click
from rich.console import Console

from usbmkt_agent.config import CONFIG_FILE, load_config, save_config

console = Console()


@click.group()
def config():
    """Client configuration."""


@config.command("show")
def config_show():
    """Print the effective configuration."""
    cfg = load_config()
    for key, value in cfg.model_dump(mode="json").items():
        console.print(f"[bold]{key}[/bold]: {value}")


@config.command("set-url")
@click.argument("base_url")
def config_set_url(base_url: str):
    """Point the client at a dashboard backend."""
    cfg = load_config().model_copy(update={"base_url": base_url.rstrip("/")})
    save_config(cfg)
    console.print(f"[green]Base URL set to {cfg.base_url}[/green]")
    console.print(f"[dim]Saved to {CONFIG_FILE}[/dim]")
