"""Randomized presentation of the choice set."""

import random

from app.schemas.game import OptionRecord

from .outcomes import CHOICES

EMOJIS = ["😭", "😄", "😌", "🤓", "😎", "😤", "🤖", "😶‍🌫️", "🌏", "📸", "💿", "👋", "🌊", "✨"]


def shuffled_options(rng: random.Random | None = None) -> list[OptionRecord]:
    """Return every choice exactly once, in random order.

    Args:
        rng: Random source. Defaults to the module-level generator; pass a
            seeded `random.Random` for deterministic ordering.
    """
    options = [
        OptionRecord(label=info.label, value=choice, description=info.description)
        for choice, info in CHOICES.items()
    ]
    (rng or random).shuffle(options)
    return options


def random_emoji(rng: random.Random | None = None) -> str:
    return (rng or random).choice(EMOJIS)
