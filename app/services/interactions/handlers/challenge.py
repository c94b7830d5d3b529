"""Handlers for the rock-paper-scissors challenge.

Flow:
1. `/sim <object>` creates a challenge session keyed by the interaction id
   and posts an Accept button.
2. Accept answers the opponent with an ephemeral select menu and deletes the
   challenge message.
3. Selecting a choice resolves the challenge, consumes the session and
   replaces the select menu with a confirmation.
"""

import logging

from app.schemas.game import GameSession, SessionKind
from app.schemas.interactions import ButtonStyle, Component, ComponentType, SelectOption
from app.services.game.options import random_emoji, shuffled_options
from app.services.game.outcomes import InvalidChoiceError, describe_result, to_choice
from app.services.interactions.custom_ids import ComponentKind, encode_custom_id
from app.services.interactions.sequencer import DeleteMessage, EditMessage

from . import command, component
from .base import (
    HandlerContext,
    HandlerResult,
    action_row,
    error_response,
    message_response,
    require_user,
    silent_failure,
)

logger = logging.getLogger(__name__)

CHALLENGE_OPTION = "object"


@command("sim")
async def handle_challenge_command(ctx: HandlerContext) -> HandlerResult:
    """Start a challenge with the invoking user's choice."""
    user_error = require_user(ctx)
    if user_error:
        return user_error

    raw_choice = ctx.interaction.data.option_value(CHALLENGE_OPTION) if ctx.interaction.data else None
    try:
        choice = to_choice(raw_choice)
    except InvalidChoiceError as e:
        return error_response("INVALID_CHOICE", str(e))

    game_id = ctx.interaction.id
    await ctx.store.create(
        game_id,
        GameSession(
            kind=SessionKind.CHALLENGE,
            owner_id=ctx.user_id,
            object_name=choice,
            players={ctx.user_id: choice},
        ),
    )

    logger.info("Challenge %s created by user %s", game_id, ctx.user_id)

    return HandlerResult(
        success=True,
        ack=message_response(
            f"Rock paper scissors challenge from <@{ctx.user_id}>",
            components=[
                action_row(
                    Component(
                        type=ComponentType.BUTTON,
                        custom_id=encode_custom_id(ComponentKind.ACCEPT_BUTTON, game_id),
                        label="Accept",
                        style=ButtonStyle.PRIMARY,
                    )
                )
            ],
        ),
    )


@component(ComponentKind.ACCEPT_BUTTON)
async def handle_accept(ctx: HandlerContext) -> HandlerResult:
    """Offer the opponent an ephemeral choice menu, then drop the challenge message."""
    game_id = ctx.component.key if ctx.component else None
    if not game_id:
        return error_response("UNKNOWN_COMPONENT", "This control is not recognized.")

    session = await ctx.store.get(game_id)
    if session is None or session.kind != SessionKind.CHALLENGE:
        logger.info("Accept for unknown challenge %s from user %s", game_id, ctx.user_id)
        return error_response("SESSION_NOT_FOUND", "This challenge is no longer active.")

    options = [
        SelectOption(label=option.label, value=option.value.value, description=option.description)
        for option in shuffled_options(ctx.rng)
    ]

    follow_ups = []
    if ctx.message_id:
        follow_ups.append(DeleteMessage(ctx.message_id))

    logger.info("Challenge %s accepted by user %s", game_id, ctx.user_id)

    return HandlerResult(
        success=True,
        ack=message_response(
            "What is your object of choice?",
            components=[
                action_row(
                    Component(
                        type=ComponentType.STRING_SELECT,
                        custom_id=encode_custom_id(ComponentKind.SELECT_CHOICE, game_id),
                        options=options,
                    )
                )
            ],
            ephemeral=True,
        ),
        follow_ups=follow_ups,
    )


@component(ComponentKind.SELECT_CHOICE)
async def handle_select_choice(ctx: HandlerContext) -> HandlerResult:
    """Resolve the challenge against the responder's choice.

    A select for a challenge that is already resolved or expired is
    acknowledged without posting anything.
    """
    game_id = ctx.component.key if ctx.component else None
    if not game_id:
        return error_response("UNKNOWN_COMPONENT", "This control is not recognized.")

    user_error = require_user(ctx)
    if user_error:
        return user_error

    values = ctx.interaction.data.values if ctx.interaction.data else []
    try:
        choice = to_choice(values[0] if values else "")
    except InvalidChoiceError as e:
        return error_response("INVALID_CHOICE", str(e))

    async with ctx.store.lock(game_id):
        session = await ctx.store.get(game_id)
        if session is None or session.kind != SessionKind.CHALLENGE:
            logger.info("Dropping select for inactive challenge %s", game_id)
            return silent_failure("SESSION_NOT_FOUND", f"Challenge {game_id} is not active")

        if not await ctx.store.compare_and_delete(game_id, session):
            logger.info("Challenge %s was consumed concurrently", game_id)
            return silent_failure("SESSION_NOT_FOUND", f"Challenge {game_id} is not active")

    result_text = describe_result(session.owner_id, session.object_name, ctx.user_id, choice)

    logger.info("Challenge %s resolved: %s", game_id, result_text)

    follow_ups = []
    if ctx.message_id:
        follow_ups.append(
            EditMessage(ctx.message_id, content=f"Nice choice {random_emoji(ctx.rng)}", components=[])
        )

    return HandlerResult(
        success=True,
        ack=message_response(result_text),
        follow_ups=follow_ups,
    )
