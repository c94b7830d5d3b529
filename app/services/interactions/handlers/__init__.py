"""Interaction handler registry and dispatcher."""

import dataclasses
import logging
from collections.abc import Awaitable, Callable

from app.schemas.interactions import InteractionType
from app.services.game.sessions import SessionBusyError
from app.services.interactions.custom_ids import (
    ComponentKind,
    InvalidComponentIdError,
    decode_custom_id,
)

from .base import HandlerContext, HandlerResult, error_response

logger = logging.getLogger(__name__)

# Type alias for handler functions
HandlerFunc = Callable[[HandlerContext], Awaitable[HandlerResult]]

# Handler registries: command name / component kind -> handler function
_command_handlers: dict[str, HandlerFunc] = {}
_component_handlers: dict[ComponentKind, HandlerFunc] = {}


def command(name: str) -> Callable[[HandlerFunc], HandlerFunc]:
    """Decorator to register a handler for an application command.

    Usage:
        @command("sim")
        async def handle_sim(ctx: HandlerContext) -> HandlerResult:
            ...
    """

    def decorator(func: HandlerFunc) -> HandlerFunc:
        if name in _command_handlers:
            logger.warning("Overwriting existing handler for command %s", name)
        _command_handlers[name] = func
        logger.debug("Registered command handler for %s: %s", name, func.__name__)
        return func

    return decorator


def component(kind: ComponentKind) -> Callable[[HandlerFunc], HandlerFunc]:
    """Decorator to register a handler for a component or modal custom id kind."""

    def decorator(func: HandlerFunc) -> HandlerFunc:
        if kind in _component_handlers:
            logger.warning("Overwriting existing handler for component %s", kind.value)
        _component_handlers[kind] = func
        logger.debug("Registered component handler for %s: %s", kind.value, func.__name__)
        return func

    return decorator


async def _dispatch_command(ctx: HandlerContext) -> HandlerResult:
    name = ctx.interaction.data.name if ctx.interaction.data else None
    handler_func = _command_handlers.get(name or "")
    if handler_func is None:
        logger.info("Unrecognized command %r from user %s", name, ctx.user_id)
        return error_response("UNKNOWN_COMMAND", f"Unrecognized command: {name}")
    return await handler_func(ctx)


async def _dispatch_component(ctx: HandlerContext) -> HandlerResult:
    custom_id = ctx.interaction.data.custom_id if ctx.interaction.data else None
    if not custom_id:
        return error_response("UNKNOWN_COMPONENT", "This control is not recognized.")

    try:
        component_id = decode_custom_id(custom_id)
    except InvalidComponentIdError as e:
        logger.info("Unrecognized component %r from user %s: %s", custom_id, ctx.user_id, e)
        return error_response("UNKNOWN_COMPONENT", "This control is not recognized.")

    handler_func = _component_handlers.get(component_id.kind)
    if handler_func is None:
        logger.info("No handler registered for component kind %s", component_id.kind.value)
        return error_response("UNKNOWN_COMPONENT", "This control is not recognized.")

    return await handler_func(dataclasses.replace(ctx, component=component_id))


async def dispatch(ctx: HandlerContext) -> HandlerResult:
    """Route an interaction to its handler.

    Args:
        ctx: The handler context containing the interaction and session store.

    Returns:
        HandlerResult from the handler, or an error result for anything
        unrecognized.
    """
    interaction_type = ctx.interaction.type
    try:
        if interaction_type == InteractionType.PING:
            return await handle_ping(ctx)
        if interaction_type == InteractionType.APPLICATION_COMMAND:
            return await _dispatch_command(ctx)
        if interaction_type in (InteractionType.MESSAGE_COMPONENT, InteractionType.MODAL_SUBMIT):
            return await _dispatch_component(ctx)
    except SessionBusyError as e:
        logger.warning("Session %s busy for interaction %s", e.key, ctx.interaction.id)
        return error_response("SESSION_BUSY", "This game is busy, please try again.")

    logger.info("Unrecognized interaction type %s (id=%s)", interaction_type, ctx.interaction.id)
    return error_response("UNKNOWN_INTERACTION", "Unrecognized interaction.")


# Import handlers to trigger registration
from . import challenge  # noqa: E402, F401
from . import stock_sim  # noqa: E402, F401
from .ping import handle_ping  # noqa: E402

__all__ = [
    "HandlerContext",
    "HandlerResult",
    "command",
    "component",
    "dispatch",
]
