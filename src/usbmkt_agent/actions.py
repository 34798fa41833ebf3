"""
Action dispatcher: Runs the client-side effect an agent reply asks for.

Only ``navigate`` is interpreted. Anything else, or a navigate without a
usable path, is ignored so newer backends never break older clients.
"""

import logging
from typing import Any, Callable, Optional

from usbmkt_agent.models.agent import Action, NavigateAction

logger = logging.getLogger(__name__)

Navigator = Callable[[str], Any]


class ActionDispatcher:
    def __init__(self, navigator: Optional[Navigator] = None):
        self._navigator = navigator

    def dispatch(self, action: Optional[Action]) -> bool:
        """Returns True when a side effect was performed."""
        if action is None:
            return False
        if isinstance(action, NavigateAction):
            return self._navigate(action)
        logger.debug("Ignoring unsupported action type %r", action.type)
        return False

    def _navigate(self, action: NavigateAction) -> bool:
        path = action.path
        if path is None:
            logger.debug("Ignoring navigate action without a path: %r", action.payload)
            return False
        if self._navigator is None:
            logger.debug("No navigator configured, skipping navigation to %s", path)
            return False
        logger.info("Navigating to %s", path)
        try:
            self._navigator(path)
        except Exception:
            logger.exception("Navigator failed for path %s", path)
            return False
        return True
