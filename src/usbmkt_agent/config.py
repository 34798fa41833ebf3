"""
Client configuration: ``~/.usbmkt/config.json`` plus environment overrides.
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ValidationError

from usbmkt_agent.gateway import DEFAULT_AGENT_PATH
from usbmkt_agent.history import DEFAULT_HISTORY_PATH
from usbmkt_agent.identity import DEFAULT_SESSION_FILE
from usbmkt_agent.transport.http import DEFAULT_BASE_URL, DEFAULT_USER_AGENT

logger = logging.getLogger(__name__)

CONFIG_FILE = Path.home() / ".usbmkt" / "config.json"
ENV_BASE_URL = "USBMKT_BASE_URL"
ENV_SESSION_FILE = "USBMKT_SESSION_FILE"


class ClientConfig(BaseModel):
    base_url: str = DEFAULT_BASE_URL
    agent_path: str = DEFAULT_AGENT_PATH
    history_path: str = DEFAULT_HISTORY_PATH
    timeout: float = 30.0
    user_agent: str = DEFAULT_USER_AGENT
    # None disables durable storage.
    session_file: Optional[Path] = DEFAULT_SESSION_FILE


def _read_file(path: Path) -> dict:
    try:
        data = json.loads(path.read_text())
    except FileNotFoundError:
        return {}
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Ignoring unreadable config file %s: %s", path, e)
        return {}
    return data if isinstance(data, dict) else {}


def load_config(path: Path = CONFIG_FILE) -> ClientConfig:
    data = _read_file(path)
    if os.environ.get(ENV_BASE_URL):
        data["base_url"] = os.environ[ENV_BASE_URL]
    if os.environ.get(ENV_SESSION_FILE):
        data["session_file"] = os.environ[ENV_SESSION_FILE]
    try:
        return ClientConfig.model_validate(data)
    except ValidationError as e:
        logger.warning("Invalid settings in %s, using defaults: %s", path, e)
        return ClientConfig()


def save_config(config: ClientConfig, path: Path = CONFIG_FILE) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(config.model_dump_json(indent=2))
