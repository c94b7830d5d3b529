"""Pydantic schemas for Discord interaction payloads and responses."""

from __future__ import annotations

from enum import IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class InteractionType(IntEnum):
    """Inbound interaction types."""

    PING = 1
    APPLICATION_COMMAND = 2
    MESSAGE_COMPONENT = 3
    APPLICATION_COMMAND_AUTOCOMPLETE = 4
    MODAL_SUBMIT = 5


class InteractionResponseType(IntEnum):
    """Synchronous acknowledgement types."""

    PONG = 1
    CHANNEL_MESSAGE_WITH_SOURCE = 4
    DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE = 5
    DEFERRED_UPDATE_MESSAGE = 6
    UPDATE_MESSAGE = 7
    MODAL = 9


class MessageFlags(IntEnum):
    EPHEMERAL = 1 << 6


class ComponentType(IntEnum):
    ACTION_ROW = 1
    BUTTON = 2
    STRING_SELECT = 3
    TEXT_INPUT = 4


class ButtonStyle(IntEnum):
    PRIMARY = 1
    SECONDARY = 2
    SUCCESS = 3
    DANGER = 4


class TextInputStyle(IntEnum):
    SHORT = 1
    PARAGRAPH = 2


# --- Inbound ---


class User(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    username: str | None = None


class Member(BaseModel):
    model_config = ConfigDict(extra="allow")

    user: User


class Message(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str


class CommandOption(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    type: int
    value: Any = None


class ModalField(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: int
    custom_id: str | None = None
    value: str | None = None
    components: list[ModalField] = Field(default_factory=list)


class InteractionData(BaseModel):
    """The `data` field; its shape depends on the interaction type."""

    model_config = ConfigDict(extra="allow")

    # Application commands
    id: str | None = None
    name: str | None = None
    options: list[CommandOption] = Field(default_factory=list)

    # Message components and modal submits
    custom_id: str | None = None
    component_type: int | None = None
    values: list[str] = Field(default_factory=list)
    components: list[ModalField] = Field(default_factory=list)

    def option_value(self, name: str) -> Any:
        for option in self.options:
            if option.name == name:
                return option.value
        return None

    def modal_value(self, custom_id: str) -> str | None:
        """Find a submitted text input value by its custom id."""
        stack = list(self.components)
        while stack:
            field = stack.pop()
            if field.custom_id == custom_id:
                return field.value
            stack.extend(field.components)
        return None


class Interaction(BaseModel):
    """Inbound interaction, already signature-verified."""

    model_config = ConfigDict(extra="allow")

    id: str
    type: int
    application_id: str | None = None
    token: str = ""
    data: InteractionData | None = None
    member: Member | None = None
    user: User | None = None
    message: Message | None = None

    @property
    def user_id(self) -> str | None:
        """Invoking user; `member.user` in guilds, `user` in DMs."""
        if self.member is not None:
            return self.member.user.id
        if self.user is not None:
            return self.user.id
        return None


# --- Outbound ---


class SelectOption(BaseModel):
    label: str
    value: str
    description: str | None = None


class Component(BaseModel):
    """A message component. Fields not relevant to the type are left unset."""

    type: ComponentType
    custom_id: str | None = None
    label: str | None = None
    style: int | None = None
    options: list[SelectOption] | None = None
    placeholder: str | None = None
    required: bool | None = None
    min_length: int | None = None
    max_length: int | None = None
    components: list[Component] | None = None


class ResponseData(BaseModel):
    content: str | None = None
    flags: int | None = None
    components: list[Component] | None = None

    # Modals
    custom_id: str | None = None
    title: str | None = None


class InteractionResponse(BaseModel):
    type: InteractionResponseType
    data: ResponseData | None = None

    @property
    def is_ephemeral(self) -> bool:
        return (
            self.data is not None
            and self.data.flags is not None
            and bool(self.data.flags & MessageFlags.EPHEMERAL)
        )

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)
