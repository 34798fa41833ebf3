"""CLI: usbmkt chat, usbmkt send, usbmkt insights"""

import json
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape

from usbmkt_agent.models.agent import AgentResult
from usbmkt_agent.models.message import Message, Role

console = Console()


def _get_client(navigator=None):
    from usbmkt_agent.cli.main import _get_client
    return _get_client(navigator)


def _run(coro):
    from usbmkt_agent.cli.main import _run
    return _run(coro)


def print_message(message: Message) -> None:
    content = escape(message.content or "")
    if message.role is Role.USER:
        console.print(f"[bold]You:[/bold] {content}")
    elif message.role is Role.ASSISTANT:
        console.print(f"[green]Agent:[/green] {content}")
    else:
        label = message.name or message.role.value
        console.print(f"[dim]{escape(label)}: {content}[/dim]")


def print_result(result: AgentResult) -> None:
    color = "red" if result.error else "green"
    console.print(f"[{color}]Agent:[/{color}] {escape(result.text_response)}")


class PathTracker:
    """Stands in for the browser location: navigate actions move it."""

    def __init__(self, path: str = "/"):
        self.path = path

    def __call__(self, path: str) -> None:
        self.path = path
        console.print(f"[magenta]-> navigated to {escape(path)}[/magenta]")


@click.command("chat")
@click.option("-s", "--session", "session_id", default=None, help="Resume this session id")
@click.option("--path", default="/", help="Starting page path sent as context")
def chat_cmd(session_id: Optional[str], path: str):
    """Interactive chat with the agent."""
    location = PathTracker(path)

    async def _chat():
        client = _get_client(navigator=location)
        try:
            with console.status("Loading conversation..."):
                if session_id:
                    await client.switch_session(session_id)
                else:
                    await client.open()
            console.print(f"[dim]Session: {client.session_id}[/dim]")
            for message in client.messages:
                print_message(message)
            console.print("[cyan]Type your message (/new starts over, /quit exits)[/cyan]\n")
            while True:
                msg = click.prompt("You", prompt_suffix=": ")
                if msg.lower() in ("/quit", "/exit"):
                    break
                if msg.lower() == "/new":
                    sid = await client.start_new_conversation()
                    console.print(f"[dim]New session: {sid}[/dim]")
                    continue
                with console.status("Thinking..."):
                    result = await client.send_message(msg, {"path": location.path})
                if result is not None:
                    print_result(result)
        except (KeyboardInterrupt, EOFError, click.Abort):
            pass
        finally:
            await client.close()

    _run(_chat())


@click.command("send")
@click.argument("message")
@click.option("--path", default="/", help="Page path sent as context")
@click.option("--json-output", "--json", is_flag=True)
def send_cmd(message: str, path: str, json_output: bool):
    """Send a one-shot message on the current session."""
    location = PathTracker(path)

    async def _send():
        client = _get_client(navigator=None if json_output else location)
        try:
            await client.open()
            if not json_output:
                console.print(f"[dim]Session: {client.session_id}[/dim]")
            return await client.send_message(message, {"path": path})
        finally:
            await client.close()

    result = _run(_send())
    if result is None:
        raise click.UsageError("Message was empty or the session is busy.")
    if json_output:
        click.echo(json.dumps(result.model_dump(mode="json")))
    else:
        print_result(result)
    if result.error:
        raise SystemExit(1)


@click.command("insights")
@click.argument("prompt")
@click.option("--schema", "schema_file", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              required=True, help="JSON schema the answer must follow")
@click.option("--path", default="/", help="Page path sent as context")
def insights_cmd(prompt: str, schema_file: Path, path: str):
    """Ask for a JSON answer that follows a schema."""
    try:
        schema = json.loads(schema_file.read_text())
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"not valid JSON: {e}", param_hint="--schema")

    async def _insights():
        client = _get_client()
        try:
            return await client.invoke_llm(prompt, response_json_schema=schema, context={"path": path})
        finally:
            await client.close()

    result = _run(_insights())
    if result.json_response is not None:
        click.echo(json.dumps(result.json_response, indent=2))
        return
    print_result(result)
    if not result.error:
        console.print("[yellow]Reply was not valid JSON.[/yellow]")
    raise SystemExit(1)
