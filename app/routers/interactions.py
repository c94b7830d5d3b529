"""Interactions endpoint the Discord platform posts to."""

import logging
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from pydantic import ValidationError

from app.dependencies.discord import DiscordClient, get_discord_client
from app.dependencies.signature import VerifiedBody
from app.schemas.interactions import Interaction
from app.services.game.sessions import SessionStore, get_session_store
from app.services.interactions import HandlerContext, dispatch, run_follow_ups

logger = logging.getLogger(__name__)

router = APIRouter(tags=["interactions"])


@router.post("/interactions")
async def interactions_endpoint(
    body: VerifiedBody,
    background_tasks: BackgroundTasks,
    store: Annotated[SessionStore, Depends(get_session_store)],
    discord: Annotated[DiscordClient, Depends(get_discord_client)],
) -> dict:
    """Handle a signed interaction.

    The handler's acknowledgement is returned as the response body. Its
    follow-ups (message deletes and edits) run as a background task once
    the response has been sent.
    """
    try:
        interaction = Interaction.model_validate_json(body)
    except ValidationError as e:
        logger.warning("Invalid interaction payload: %s", e)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid interaction payload",
        )

    logger.debug("Interaction %s of type %s", interaction.id, interaction.type)

    result = await dispatch(HandlerContext(interaction=interaction, store=store))

    if not result.success:
        logger.info(
            "Interaction %s failed: %s - %s",
            interaction.id,
            result.error_code,
            result.error_message,
        )

    if result.follow_ups:
        background_tasks.add_task(run_follow_ups, interaction.token, result.follow_ups, discord)

    return result.ack.to_payload()
