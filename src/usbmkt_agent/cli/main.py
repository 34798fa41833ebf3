"""
USBMKT agent CLI: `usbmkt` command.

Commands:
  usbmkt chat                  Interactive REPL on the current session
  usbmkt send <message>        One-shot message
  usbmkt insights <prompt>     Schema-guided JSON answer
  usbmkt history               Persisted turns of the current session
  usbmkt session show|new      Inspect or rotate the session id
  usbmkt config show|set-url   Client configuration
"""

import asyncio
import logging
from typing import Optional

try:
    import click
    from rich.console import Console
except ImportError:
    raise SystemExit("CLI requires extras: pip install usbmkt-agent[cli]")

from usbmkt_agent import __version__
from usbmkt_agent.actions import Navigator
from usbmkt_agent.client import AsyncAgentClient
from usbmkt_agent.config import load_config

console = Console()


def _get_client(navigator: Optional[Navigator] = None) -> AsyncAgentClient:
    return AsyncAgentClient(config=load_config(), navigator=navigator)


def _run(coro):
    return asyncio.run(coro)


@click.group()
@click.version_option(__version__)
@click.option("-v", "--verbose", is_flag=True, help="Log debug output to stderr")
def main(verbose: bool):
    """USBMKT agent CLI: Chat with the dashboard's AI assistant."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Register subcommands from separate modules
from usbmkt_agent.cli.chat import chat_cmd, insights_cmd, send_cmd
from usbmkt_agent.cli.config_cmd import config
from usbmkt_agent.cli.session import history_cmd, session

main.add_command(chat_cmd)
main.add_command(send_cmd)
main.add_command(insights_cmd)
main.add_command(history_cmd)
main.add_command(session)
main.add_command(config)


if __name__ == "__main__":
    main()
