"""Tests for follow-up execution after the acknowledgement."""

import logging

import pytest

from app.schemas.interactions import Component, ComponentType
from app.services.interactions import DeleteMessage, EditMessage, run_follow_ups

from .conftest import TOKEN, FakeDiscordClient


class TestRunFollowUps:
    @pytest.mark.asyncio
    async def test_runs_in_order(self, discord_client: FakeDiscordClient):
        succeeded = await run_follow_ups(
            TOKEN,
            [DeleteMessage("m1"), EditMessage("m2", content="Nice choice", components=[])],
            discord_client,
        )

        assert succeeded == 2
        assert discord_client.calls == [
            ("DELETE", TOKEN, "m1", None),
            ("PATCH", TOKEN, "m2", {"content": "Nice choice", "components": []}),
        ]

    @pytest.mark.asyncio
    async def test_failures_are_logged_and_do_not_stop_the_rest(self, caplog):
        client = FakeDiscordClient(fail=True)

        with caplog.at_level(logging.ERROR):
            succeeded = await run_follow_ups(TOKEN, [DeleteMessage("m1"), DeleteMessage("m2")], client)

        assert succeeded == 0
        assert [call[2] for call in client.calls] == ["m1", "m2"]
        assert "DeleteMessage failed" in caplog.text

    @pytest.mark.asyncio
    async def test_nothing_to_do(self, discord_client: FakeDiscordClient):
        assert await run_follow_ups(TOKEN, [], discord_client) == 0
        assert discord_client.calls == []


class TestEditMessageBody:
    def test_components_are_serialized(self):
        edit = EditMessage(
            "m1",
            content="hi",
            components=[Component(type=ComponentType.ACTION_ROW, components=[])],
        )

        assert edit.body() == {"content": "hi", "components": [{"type": 1, "components": []}]}
