"""Rock-paper-scissors outcome table."""

import logging
from dataclasses import dataclass

from app.schemas.game import Choice, Outcome

logger = logging.getLogger(__name__)


class InvalidChoiceError(ValueError):
    """Raised when a value is not one of the known choices."""


@dataclass(frozen=True)
class ChoiceInfo:
    label: str
    description: str
    beats: dict[Choice, str]  # defeated choice -> verb


CHOICES: dict[Choice, ChoiceInfo] = {
    Choice.ROCK: ChoiceInfo(
        label="Rock",
        description="sedimentary, igneous, or perhaps even metamorphic",
        beats={Choice.SCISSORS: "crushes"},
    ),
    Choice.PAPER: ChoiceInfo(
        label="Paper",
        description="versatile and iconic",
        beats={Choice.ROCK: "covers"},
    ),
    Choice.SCISSORS: ChoiceInfo(
        label="Scissors",
        description="careful ! sharp ! edges !!",
        beats={Choice.PAPER: "cut"},
    ),
}


def to_choice(value: Choice | str) -> Choice:
    """Coerce a raw select value into a Choice.

    Raises:
        InvalidChoiceError: If the value is not a known choice.
    """
    if isinstance(value, Choice):
        return value
    try:
        return Choice(str(value).lower())
    except ValueError:
        raise InvalidChoiceError(f"Unknown choice: {value!r}") from None


def resolve(a: Choice | str, b: Choice | str) -> Outcome:
    """Return the outcome of `a` played against `b`."""
    choice_a = to_choice(a)
    choice_b = to_choice(b)

    if choice_a == choice_b:
        return Outcome.DRAW
    if choice_b in CHOICES[choice_a].beats:
        return Outcome.A_WINS
    return Outcome.B_WINS


def describe_result(
    challenger_id: str,
    challenger_choice: Choice | str,
    opponent_id: str,
    opponent_choice: Choice | str,
) -> str:
    """Render the outcome of a challenge as message content."""
    challenger_choice = to_choice(challenger_choice)
    opponent_choice = to_choice(opponent_choice)
    outcome = resolve(challenger_choice, opponent_choice)

    if outcome is Outcome.DRAW:
        return f"<@{challenger_id}> and <@{opponent_id}> draw with **{challenger_choice.value}**"

    if outcome is Outcome.A_WINS:
        winner_id, winner, loser_id, loser = challenger_id, challenger_choice, opponent_id, opponent_choice
    else:
        winner_id, winner, loser_id, loser = opponent_id, opponent_choice, challenger_id, challenger_choice

    verb = CHOICES[winner].beats[loser]
    logger.debug("Challenge resolved: %s %s %s", winner.value, verb, loser.value)
    return f"<@{winner_id}>'s **{winner.value}** {verb} <@{loser_id}>'s **{loser.value}**"
