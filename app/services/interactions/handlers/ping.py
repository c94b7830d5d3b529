"""Handler for PING interactions."""

import logging

from app.schemas.interactions import InteractionResponse, InteractionResponseType

from .base import HandlerContext, HandlerResult

logger = logging.getLogger(__name__)


async def handle_ping(ctx: HandlerContext) -> HandlerResult:
    """Answer the endpoint verification handshake with PONG."""
    logger.debug("Ping/pong for interaction %s", ctx.interaction.id)

    return HandlerResult(
        success=True,
        ack=InteractionResponse(type=InteractionResponseType.PONG),
    )
