"""Handlers for the stock simulation game.

The simulation belongs to the user who ran `/test` and is keyed by their
user id. Each step answers with a single acknowledgement:

    /test -> Start Sim button
    start_sim -> ephemeral Buy / Sell prompt (start message deleted)
    buy / sell -> price modal, session waits for a price
    sim_price -> trade summary, session consumed
"""

import logging
import math

from app.schemas.game import GameSession, SessionKind, TradeSide
from app.schemas.interactions import (
    ButtonStyle,
    Component,
    ComponentType,
    InteractionResponse,
    InteractionResponseType,
    ResponseData,
    TextInputStyle,
)
from app.services.interactions.custom_ids import ComponentKind, encode_custom_id
from app.services.interactions.sequencer import DeleteMessage

from . import command, component
from .base import (
    HandlerContext,
    HandlerResult,
    action_row,
    error_response,
    message_response,
    require_user,
)

logger = logging.getLogger(__name__)

PRICE_INPUT_ID = "price"
NO_SIMULATION_MESSAGE = "No active simulation found."

_TRADE_SIDES = {
    ComponentKind.BUY: TradeSide.BUY,
    ComponentKind.SELL: TradeSide.SELL,
}


async def _get_simulation(ctx: HandlerContext, key: str) -> GameSession | None:
    session = await ctx.store.get(key)
    if session is None or session.kind != SessionKind.STOCK_SIM:
        return None
    return session


def _require_owner(ctx: HandlerContext) -> tuple[str | None, HandlerResult | None]:
    """Resolve the simulation key from the custom id and check the clicker owns it."""
    user_error = require_user(ctx)
    if user_error:
        return None, user_error

    key = ctx.component.key if ctx.component else None
    if not key:
        return None, error_response("UNKNOWN_COMPONENT", "This control is not recognized.")
    if key != ctx.user_id:
        return None, error_response("NOT_SESSION_OWNER", "This simulation belongs to someone else.")
    return key, None


@command("test")
async def handle_test_command(ctx: HandlerContext) -> HandlerResult:
    """Create a fresh simulation for the invoking user."""
    user_error = require_user(ctx)
    if user_error:
        return user_error

    async with ctx.store.lock(ctx.user_id):
        await ctx.store.create(
            ctx.user_id,
            GameSession(
                kind=SessionKind.STOCK_SIM,
                owner_id=ctx.user_id,
                players={ctx.user_id: None},
            ),
        )

    logger.info("Simulation created for user %s", ctx.user_id)

    return HandlerResult(
        success=True,
        ack=message_response(
            "Click to start the simulation.",
            components=[
                action_row(
                    Component(
                        type=ComponentType.BUTTON,
                        custom_id=encode_custom_id(ComponentKind.START_SIM),
                        label="Start Sim",
                        style=ButtonStyle.PRIMARY,
                    )
                )
            ],
        ),
    )


@component(ComponentKind.START_SIM)
async def handle_start_sim(ctx: HandlerContext) -> HandlerResult:
    """Offer buy or sell to the clicking user's simulation.

    The simulation is looked up by the clicking user's id; the button itself
    carries no key.
    """
    user_error = require_user(ctx)
    if user_error:
        return user_error

    session = await _get_simulation(ctx, ctx.user_id)
    if session is None:
        logger.info("start_sim without an active simulation for user %s", ctx.user_id)
        return error_response("SESSION_NOT_FOUND", NO_SIMULATION_MESSAGE)

    follow_ups = []
    if ctx.message_id:
        follow_ups.append(DeleteMessage(ctx.message_id))

    return HandlerResult(
        success=True,
        ack=message_response(
            "Do you want to buy or sell?",
            components=[
                action_row(
                    Component(
                        type=ComponentType.BUTTON,
                        custom_id=encode_custom_id(ComponentKind.BUY, ctx.user_id),
                        label="Buy",
                        style=ButtonStyle.PRIMARY,
                    ),
                    Component(
                        type=ComponentType.BUTTON,
                        custom_id=encode_custom_id(ComponentKind.SELL, ctx.user_id),
                        label="Sell",
                        style=ButtonStyle.DANGER,
                    ),
                )
            ],
            ephemeral=True,
        ),
        follow_ups=follow_ups,
    )


@component(ComponentKind.BUY)
@component(ComponentKind.SELL)
async def handle_trade_side(ctx: HandlerContext) -> HandlerResult:
    """Record the trade side and ask for the stock price."""
    key, owner_error = _require_owner(ctx)
    if owner_error:
        return owner_error

    side = _TRADE_SIDES[ctx.component.kind]

    async with ctx.store.lock(key):
        session = await _get_simulation(ctx, key)
        if session is None:
            return error_response("SESSION_NOT_FOUND", NO_SIMULATION_MESSAGE)

        session.trade_side = side
        session.waiting_for_price = True
        await ctx.store.save(key, session)

    logger.info("Simulation %s waiting for %s price", key, side.value)

    return HandlerResult(
        success=True,
        ack=InteractionResponse(
            type=InteractionResponseType.MODAL,
            data=ResponseData(
                custom_id=encode_custom_id(ComponentKind.SIM_PRICE, key),
                title=f"{side.value.capitalize()} order",
                components=[
                    action_row(
                        Component(
                            type=ComponentType.TEXT_INPUT,
                            custom_id=PRICE_INPUT_ID,
                            label="Stock price",
                            style=TextInputStyle.SHORT,
                            placeholder="e.g. 12.50",
                            required=True,
                            min_length=1,
                            max_length=12,
                        )
                    )
                ],
            ),
        ),
    )


def parse_price(raw: str | None) -> float | None:
    """Parse a user-entered price. Returns None unless it is a positive number."""
    if raw is None:
        return None
    try:
        price = float(raw.strip().lstrip("$").replace(",", ""))
    except ValueError:
        return None
    if not math.isfinite(price) or price <= 0:
        return None
    return price


@component(ComponentKind.SIM_PRICE)
async def handle_price_submit(ctx: HandlerContext) -> HandlerResult:
    """Complete the simulation round with the submitted price."""
    key, owner_error = _require_owner(ctx)
    if owner_error:
        return owner_error

    raw_price = ctx.interaction.data.modal_value(PRICE_INPUT_ID) if ctx.interaction.data else None

    async with ctx.store.lock(key):
        session = await _get_simulation(ctx, key)
        if session is None:
            return error_response("SESSION_NOT_FOUND", NO_SIMULATION_MESSAGE)
        if not session.waiting_for_price or session.trade_side is None:
            return error_response("NOT_AWAITING_PRICE", "Choose buy or sell first.")

        price = parse_price(raw_price)
        if price is None:
            return error_response("INVALID_PRICE", "Please enter a positive number for the price.")

        await ctx.store.delete(key)

    verb = "bought" if session.trade_side == TradeSide.BUY else "sold"
    logger.info("Simulation %s completed: %s at %.2f", key, verb, price)

    return HandlerResult(
        success=True,
        ack=message_response(f"<@{ctx.user_id}> {verb} at ${price:,.2f}. Simulation complete."),
    )
