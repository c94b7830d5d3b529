"""Base types and helpers for interaction handlers."""

import random
from dataclasses import dataclass, field

from app.schemas.interactions import (
    Component,
    ComponentType,
    Interaction,
    InteractionResponse,
    InteractionResponseType,
    MessageFlags,
    ResponseData,
)
from app.services.game.sessions import SessionStore
from app.services.interactions.custom_ids import ComponentId
from app.services.interactions.sequencer import FollowUp


@dataclass
class HandlerContext:
    """Context passed to each interaction handler."""

    interaction: Interaction
    store: SessionStore
    rng: random.Random | None = None
    component: ComponentId | None = None

    @property
    def user_id(self) -> str | None:
        return self.interaction.user_id

    @property
    def message_id(self) -> str | None:
        message = self.interaction.message
        return message.id if message is not None else None


@dataclass
class HandlerResult:
    """Result returned by interaction handlers.

    `ack` is the one synchronous response to the interaction; `follow_ups`
    run after it has been sent.
    """

    success: bool
    ack: InteractionResponse
    follow_ups: list[FollowUp] = field(default_factory=list)
    error_code: str | None = None
    error_message: str | None = None


def message_response(
    content: str,
    components: list[Component] | None = None,
    ephemeral: bool = False,
) -> InteractionResponse:
    """Build a CHANNEL_MESSAGE_WITH_SOURCE response."""
    return InteractionResponse(
        type=InteractionResponseType.CHANNEL_MESSAGE_WITH_SOURCE,
        data=ResponseData(
            content=content,
            flags=MessageFlags.EPHEMERAL if ephemeral else None,
            components=components,
        ),
    )


def action_row(*components: Component) -> Component:
    return Component(type=ComponentType.ACTION_ROW, components=list(components))


def error_response(error_code: str, message: str) -> HandlerResult:
    """Build a failed HandlerResult answered with an ephemeral message."""
    return HandlerResult(
        success=False,
        ack=message_response(message, ephemeral=True),
        error_code=error_code,
        error_message=message,
    )


def silent_failure(error_code: str, message: str) -> HandlerResult:
    """Build a failed HandlerResult that acknowledges without posting anything."""
    return HandlerResult(
        success=False,
        ack=InteractionResponse(type=InteractionResponseType.DEFERRED_UPDATE_MESSAGE),
        error_code=error_code,
        error_message=message,
    )


def require_user(ctx: HandlerContext) -> HandlerResult | None:
    """Return an error result if the interaction carries no user."""
    if ctx.user_id is None:
        return error_response("MISSING_USER", "Could not determine who sent this interaction.")
    return None
