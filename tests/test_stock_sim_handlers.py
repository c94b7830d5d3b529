"""Tests for the stock simulation handlers."""

import asyncio

import pytest

from app.schemas.game import SessionKind, TradeSide
from app.schemas.interactions import ComponentType, InteractionResponseType
from app.services.game.sessions import InMemorySessionStore
from app.services.interactions import DeleteMessage
from app.services.interactions.handlers.stock_sim import parse_price

from .conftest import (
    CHALLENGER_ID,
    MESSAGE_ID,
    OPPONENT_ID,
    FakeClock,
    command_interaction,
    component_interaction,
    modal_interaction,
    run_interaction,
)

USER_ID = CHALLENGER_ID


async def restart_after(ticks: int, store: InMemorySessionStore):
    for _ in range(ticks):
        await asyncio.sleep(0)
    return await run_interaction(command_interaction("test"), store)


class YieldingStore(InMemorySessionStore):
    """In-memory store that gives up the event loop before every read and write."""

    async def create(self, key, session):
        await asyncio.sleep(0)
        await super().create(key, session)

    async def get(self, key):
        await asyncio.sleep(0)
        return await super().get(key)

    async def save(self, key, session):
        await asyncio.sleep(0)
        await super().save(key, session)


async def start_simulation(store: InMemorySessionStore) -> None:
    result = await run_interaction(command_interaction("test"), store)
    assert result.success


async def choose_side(store: InMemorySessionStore, side: str = "buy") -> None:
    result = await run_interaction(component_interaction(f"{side}:{USER_ID}"), store)
    assert result.success


class TestTestCommand:
    @pytest.mark.asyncio
    async def test_creates_session_keyed_by_user(self, store: InMemorySessionStore):
        result = await run_interaction(command_interaction("test"), store)

        session = await store.get(USER_ID)
        assert session.kind == SessionKind.STOCK_SIM
        assert session.owner_id == USER_ID
        assert not session.waiting_for_price

        assert result.ack.data.content == "Click to start the simulation."
        button = result.ack.data.components[0].components[0]
        assert button.custom_id == "start_sim"
        assert button.label == "Start Sim"

    @pytest.mark.asyncio
    async def test_restart_is_not_lost_to_a_concurrent_trade(self, clock: FakeClock):
        """A /test racing a buy click leaves a session created by the new /test."""
        for ticks in range(8):
            store = YieldingStore(ttl_seconds=900, lock_timeout=1.0, clock=clock)
            await start_simulation(store)
            clock.advance(600)

            await asyncio.gather(
                run_interaction(component_interaction(f"buy:{USER_ID}"), store),
                restart_after(ticks, store),
            )

            session = await store.get(USER_ID)
            assert session.created_at == clock.now, f"fresh session lost after {ticks} ticks"


class TestStartSim:
    @pytest.mark.asyncio
    async def test_no_active_simulation(self, store: InMemorySessionStore):
        result = await run_interaction(component_interaction("start_sim"), store)

        assert not result.success
        assert result.error_code == "SESSION_NOT_FOUND"
        assert result.ack.is_ephemeral
        assert result.ack.data.content == "No active simulation found."
        assert result.follow_ups == []
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_single_buy_sell_prompt(self, store: InMemorySessionStore):
        await start_simulation(store)
        before = await store.get(USER_ID)

        result = await run_interaction(component_interaction("start_sim"), store)

        assert result.success
        assert result.ack.type == InteractionResponseType.CHANNEL_MESSAGE_WITH_SOURCE
        assert result.ack.is_ephemeral
        assert result.ack.data.content == "Do you want to buy or sell?"
        buttons = result.ack.data.components[0].components
        assert [b.custom_id for b in buttons] == [f"buy:{USER_ID}", f"sell:{USER_ID}"]
        assert result.follow_ups == [DeleteMessage(MESSAGE_ID)]
        assert await store.get(USER_ID) == before

    @pytest.mark.asyncio
    async def test_looked_up_by_clicking_user(self, store: InMemorySessionStore):
        await start_simulation(store)

        result = await run_interaction(component_interaction("start_sim", user_id=OPPONENT_ID), store)

        assert result.error_code == "SESSION_NOT_FOUND"


class TestTradeSide:
    @pytest.mark.asyncio
    async def test_buy_asks_for_price(self, store: InMemorySessionStore):
        await start_simulation(store)

        result = await run_interaction(component_interaction(f"buy:{USER_ID}"), store)

        assert result.ack.type == InteractionResponseType.MODAL
        assert result.ack.data.custom_id == f"sim_price:{USER_ID}"
        text_input = result.ack.data.components[0].components[0]
        assert text_input.type == ComponentType.TEXT_INPUT
        assert text_input.custom_id == "price"

        session = await store.get(USER_ID)
        assert session.waiting_for_price
        assert session.trade_side == TradeSide.BUY

    @pytest.mark.asyncio
    async def test_sell_records_side(self, store: InMemorySessionStore):
        await start_simulation(store)
        await choose_side(store, "sell")

        assert (await store.get(USER_ID)).trade_side == TradeSide.SELL

    @pytest.mark.asyncio
    async def test_other_users_cannot_trade(self, store: InMemorySessionStore):
        await start_simulation(store)

        result = await run_interaction(component_interaction(f"buy:{USER_ID}", user_id=OPPONENT_ID), store)

        assert result.error_code == "NOT_SESSION_OWNER"
        assert not (await store.get(USER_ID)).waiting_for_price

    @pytest.mark.asyncio
    async def test_trade_without_simulation(self, store: InMemorySessionStore):
        result = await run_interaction(component_interaction(f"sell:{USER_ID}"), store)

        assert result.error_code == "SESSION_NOT_FOUND"
        assert len(store) == 0


class TestPriceSubmit:
    @pytest.mark.asyncio
    async def test_valid_price_completes_simulation(self, store: InMemorySessionStore):
        await start_simulation(store)
        await choose_side(store, "buy")

        result = await run_interaction(modal_interaction(f"sim_price:{USER_ID}", {"price": "$1,234.5"}), store)

        assert result.success
        assert result.ack.data.content == f"<@{USER_ID}> bought at $1,234.50. Simulation complete."
        assert await store.get(USER_ID) is None

    @pytest.mark.asyncio
    async def test_invalid_price_keeps_waiting(self, store: InMemorySessionStore):
        await start_simulation(store)
        await choose_side(store, "sell")

        result = await run_interaction(modal_interaction(f"sim_price:{USER_ID}", {"price": "cheap"}), store)

        assert result.error_code == "INVALID_PRICE"
        assert result.ack.is_ephemeral
        assert (await store.get(USER_ID)).waiting_for_price

    @pytest.mark.asyncio
    async def test_price_before_side(self, store: InMemorySessionStore):
        await start_simulation(store)

        result = await run_interaction(modal_interaction(f"sim_price:{USER_ID}", {"price": "10"}), store)

        assert result.error_code == "NOT_AWAITING_PRICE"


class TestParsePrice:
    def test_accepts_plain_and_formatted_numbers(self):
        assert parse_price("12") == 12.0
        assert parse_price(" $12.50 ") == 12.5
        assert parse_price("1,000") == 1000.0

    def test_rejects_non_positive_and_garbage(self):
        for raw in (None, "", "0", "-3", "abc", "nan", "inf"):
            assert parse_price(raw) is None
