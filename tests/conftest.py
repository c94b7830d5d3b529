"""Shared fixtures and builders for interaction tests."""

import os
import random
from datetime import datetime, timedelta, timezone
from typing import Any

# Settings are read when app.main is imported; give them harmless defaults
os.environ.setdefault("DISCORD_APP_ID", "1000000000000000001")
os.environ.setdefault("DISCORD_PUBLIC_KEY", "00" * 32)
os.environ.setdefault("DISCORD_BOT_TOKEN", "test-bot-token")

import pytest  # noqa: E402

from app.schemas.interactions import ComponentType, Interaction, InteractionType  # noqa: E402
from app.services.game.sessions import InMemorySessionStore  # noqa: E402
from app.services.interactions import HandlerContext, HandlerResult, dispatch  # noqa: E402

# Fixed ids for deterministic testing
APP_ID = "1000000000000000001"
CHALLENGER_ID = "111111111111111111"
OPPONENT_ID = "222222222222222222"
INTERACTION_ID = "900000000000000001"
MESSAGE_ID = "800000000000000001"
TOKEN = "interaction-token"


class FakeClock:
    """Controllable UTC clock for session expiry tests."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeDiscordClient:
    """Records follow-up calls instead of hitting the REST API."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: list[tuple[str, str, str, dict | None]] = []

    async def delete_message(self, token: str, message_id: str) -> None:
        self.calls.append(("DELETE", token, message_id, None))
        if self.fail:
            raise RuntimeError("simulated delete failure")

    async def edit_message(self, token: str, message_id: str, body: dict[str, Any]) -> None:
        self.calls.append(("PATCH", token, message_id, body))
        if self.fail:
            raise RuntimeError("simulated patch failure")

    async def install_global_commands(self, commands: list[dict[str, Any]]) -> None:
        self.calls.append(("PUT", "", "commands", {"commands": commands}))

    async def close(self) -> None:
        pass


def build_interaction(
    interaction_type: InteractionType,
    data: dict[str, Any] | None = None,
    user_id: str = CHALLENGER_ID,
    interaction_id: str = INTERACTION_ID,
    message_id: str | None = None,
) -> dict[str, Any]:
    """Build a raw interaction payload as the platform would send it."""
    payload: dict[str, Any] = {
        "id": interaction_id,
        "type": int(interaction_type),
        "application_id": APP_ID,
        "token": TOKEN,
        "member": {"user": {"id": user_id, "username": f"user-{user_id[:4]}"}},
    }
    if data is not None:
        payload["data"] = data
    if message_id is not None:
        payload["message"] = {"id": message_id}
    return payload


def command_interaction(name: str, options: dict[str, Any] | None = None, **kwargs) -> Interaction:
    data = {
        "id": "700000000000000001",
        "name": name,
        "type": 1,
        "options": [{"name": k, "type": 3, "value": v} for k, v in (options or {}).items()],
    }
    return Interaction.model_validate(build_interaction(InteractionType.APPLICATION_COMMAND, data, **kwargs))


def component_interaction(custom_id: str, values: list[str] | None = None, **kwargs) -> Interaction:
    component_type = ComponentType.STRING_SELECT if values is not None else ComponentType.BUTTON
    data = {"custom_id": custom_id, "component_type": int(component_type), "values": values or []}
    kwargs.setdefault("message_id", MESSAGE_ID)
    return Interaction.model_validate(build_interaction(InteractionType.MESSAGE_COMPONENT, data, **kwargs))


def modal_interaction(custom_id: str, fields: dict[str, str], **kwargs) -> Interaction:
    data = {
        "custom_id": custom_id,
        "components": [
            {"type": 1, "components": [{"type": 4, "custom_id": k, "value": v}]} for k, v in fields.items()
        ],
    }
    return Interaction.model_validate(build_interaction(InteractionType.MODAL_SUBMIT, data, **kwargs))


async def run_interaction(
    interaction: Interaction,
    store: InMemorySessionStore,
    rng: random.Random | None = None,
) -> HandlerResult:
    return await dispatch(HandlerContext(interaction=interaction, store=store, rng=rng))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> InMemorySessionStore:
    """Empty in-memory store with a 15 minute TTL on a fake clock."""
    return InMemorySessionStore(ttl_seconds=900, lock_timeout=1.0, clock=clock)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def discord_client() -> FakeDiscordClient:
    return FakeDiscordClient()
