"""Out-of-band follow-up calls issued after the synchronous acknowledgement.

Handlers never talk to the REST API themselves. They return an ordered list
of follow-ups alongside their ack; the HTTP boundary sends the ack first and
then runs the follow-ups in a background task. A failing follow-up is logged
and skipped, it never touches the ack that was already sent.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from app.dependencies.discord import DiscordClient
from app.schemas.interactions import Component

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeleteMessage:
    """Delete a previously sent message."""

    message_id: str

    async def execute(self, client: DiscordClient, token: str) -> None:
        await client.delete_message(token, self.message_id)


@dataclass(frozen=True)
class EditMessage:
    """Patch a previously sent message's content and components."""

    message_id: str
    content: str | None = None
    components: list[Component] = field(default_factory=list)

    def body(self) -> dict[str, Any]:
        return {
            "content": self.content,
            "components": [c.model_dump(mode="json", exclude_none=True) for c in self.components],
        }

    async def execute(self, client: DiscordClient, token: str) -> None:
        await client.edit_message(token, self.message_id, self.body())


FollowUp = DeleteMessage | EditMessage


async def run_follow_ups(token: str, follow_ups: list[FollowUp], client: DiscordClient) -> int:
    """Execute follow-ups in order.

    Args:
        token: Interaction token the follow-ups are addressed with.
        follow_ups: Calls to make, in order.
        client: Discord REST client.

    Returns:
        Number of follow-ups that succeeded.
    """
    succeeded = 0
    for follow_up in follow_ups:
        try:
            await follow_up.execute(client, token)
            succeeded += 1
            logger.debug("Follow-up %s succeeded", follow_up)
        except Exception as e:
            logger.error("Follow-up %s failed: %s", type(follow_up).__name__, e)

    if follow_ups:
        logger.info("Ran %d/%d follow-ups", succeeded, len(follow_ups))
    return succeeded
