"""CLI: usbmkt session show|new, usbmkt history"""

import json

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

console = Console()


def _get_client():
    from usbmkt_agent.cli.main import _get_client
    return _get_client()


def _run(coro):
    from usbmkt_agent.cli.main import _run
    return _run(coro)


@click.group()
def session():
    """Session identifier management."""


@session.command("show")
def session_show():
    """Show the current session id."""
    client = _get_client()
    try:
        session_id = client.identity.acquire()
        persistent = client.identity.persistent
    finally:
        _run(client.close())
    console.print(f"Session: [bold]{session_id}[/bold]")
    if not persistent:
        console.print("[yellow]Session storage unavailable; this id will not be kept.[/yellow]")


@session.command("new")
def session_new():
    """Start a new conversation (rotate the session id)."""
    client = _get_client()
    try:
        session_id = client.identity.rotate()
    finally:
        _run(client.close())
    console.print(f"[green]New session: {session_id}[/green]")


@click.command("history")
@click.option("-s", "--session", "session_id", default=None, help="Session id (defaults to the current one)")
@click.option("--json-output", "--json", is_flag=True)
def history_cmd(session_id, json_output):
    """Show the persisted turns of a session."""

    async def _history():
        client = _get_client()
        try:
            sid = session_id or client.identity.acquire()
            return sid, await client.get_history(sid)
        finally:
            await client.close()

    sid, result = _run(_history())
    if result.error:
        console.print(f"[red]Could not load history: {escape(result.error)}[/red]")
        raise SystemExit(1)
    if json_output:
        click.echo(json.dumps([m.model_dump(mode="json", exclude={"id"}) for m in result.messages], indent=2))
        return
    table = Table(title=f"History of {sid} ({len(result.messages)} turns)")
    table.add_column("#", justify="right")
    table.add_column("Role", style="bold")
    table.add_column("Content")
    for i, m in enumerate(result.messages, start=1):
        table.add_row(str(i), m.name or m.role.value, m.content or "")
    console.print(table)
