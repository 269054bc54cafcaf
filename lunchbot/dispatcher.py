"""
Message dispatcher for the lunch bot.

Handles:
- Filtering chat lines down to `lb ...` commands
- Applying them to the engine and sending the reply
- Error handling and logging
"""

import logging
from typing import Callable, Optional

from .engine import LunchBotEngine, MembershipResolver

logger = logging.getLogger(__name__)

COMMAND_PREFIX = "lb "


class Dispatcher:
    """Routes chat messages to the lunch bot engine."""

    def __init__(self, engine: LunchBotEngine, list_members: MembershipResolver):
        self.engine = engine
        self.list_members = list_members

    def handle_message(
        self,
        text: str,
        say: Callable[[str], None]
    ) -> Optional[str]:
        """
        Handle an incoming chat message.

        Args:
            text: Message text
            say: Slack say function for responses

        Returns:
            The reply that was sent, or None if the message was not a command
        """
        if not text.startswith(COMMAND_PREFIX):
            return None

        try:
            response = self.engine.apply(text, self.list_members)
        except Exception as e:
            logger.exception(f"Error handling command {text[:100]!r}")
            say(f"An error occurred: {str(e)}")
            return None

        # The engine lock is released by now
        say(response)
        return response
