"""Application command definitions installed on the Discord application."""

import logging
from typing import Any

from app.dependencies.discord import DiscordClient
from app.services.game.outcomes import CHOICES

logger = logging.getLogger(__name__)

# Application command option types
STRING_OPTION = 3

# Application command integration/context types
GUILD_INSTALL = 0
USER_INSTALL = 1
CONTEXT_GUILD = 0
CONTEXT_BOT_DM = 1
CONTEXT_PRIVATE_CHANNEL = 2

TEST_COMMAND: dict[str, Any] = {
    "name": "test",
    "description": "Start a stock simulation",
    "type": 1,
    "integration_types": [GUILD_INSTALL, USER_INSTALL],
    "contexts": [CONTEXT_GUILD, CONTEXT_BOT_DM, CONTEXT_PRIVATE_CHANNEL],
}

CHALLENGE_COMMAND: dict[str, Any] = {
    "name": "sim",
    "description": "Challenge to a match of rock paper scissors",
    "type": 1,
    "options": [
        {
            "type": STRING_OPTION,
            "name": "object",
            "description": "Pick your object",
            "required": True,
            "choices": [{"name": info.label, "value": choice.value} for choice, info in CHOICES.items()],
        }
    ],
    "integration_types": [GUILD_INSTALL, USER_INSTALL],
    "contexts": [CONTEXT_GUILD, CONTEXT_PRIVATE_CHANNEL],
}

ALL_COMMANDS = [TEST_COMMAND, CHALLENGE_COMMAND]


async def install_commands(client: DiscordClient) -> bool:
    """Install all global commands. Failures are logged, not raised."""
    try:
        await client.install_global_commands(ALL_COMMANDS)
    except Exception as e:
        logger.error("Failed to install global commands: %s", e)
        return False
    return True
