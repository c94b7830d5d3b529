from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


class Choice(str, Enum):
    ROCK = "rock"
    PAPER = "paper"
    SCISSORS = "scissors"


class Outcome(str, Enum):
    """Outcome of a match, seen from the first choice's side."""

    A_WINS = "a_wins"
    B_WINS = "b_wins"
    DRAW = "draw"

    def inverse(self) -> "Outcome":
        if self is Outcome.A_WINS:
            return Outcome.B_WINS
        if self is Outcome.B_WINS:
            return Outcome.A_WINS
        return Outcome.DRAW


class SessionKind(str, Enum):
    CHALLENGE = "challenge"
    STOCK_SIM = "stock_sim"


class TradeSide(str, Enum):
    BUY = "buy"
    SELL = "sell"


class OptionRecord(BaseModel):
    """A choice as presented in a select menu."""

    label: str
    value: Choice
    description: str


class GameSession(BaseModel):
    """In-progress game state, keyed in the session store.

    Challenges are keyed by the id of the interaction that issued them,
    stock simulations by the id of the user who started them.
    """

    kind: SessionKind
    owner_id: str = Field(..., description="User who initiated the game")
    object_name: Choice | None = Field(None, description="Challenger's choice")
    players: dict[str, Choice | None] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Stock simulation
    waiting_for_price: bool = False
    trade_side: TradeSide | None = None
    stock_price: float = 0
