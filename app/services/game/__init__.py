"""Game service module.

Provides:
- Outcome table (outcomes.py)
- Shuffled choice presentation (options.py)
- Session store and reaper (sessions.py)
"""

from .options import random_emoji, shuffled_options
from .outcomes import CHOICES, InvalidChoiceError, describe_result, resolve, to_choice
from .sessions import (
    InMemorySessionStore,
    RedisSessionStore,
    SessionBusyError,
    SessionReaper,
    SessionStore,
    get_session_store,
    set_session_store,
)

__all__ = [
    # Outcomes
    "CHOICES",
    "InvalidChoiceError",
    "describe_result",
    "resolve",
    "to_choice",
    # Options
    "random_emoji",
    "shuffled_options",
    # Sessions
    "InMemorySessionStore",
    "RedisSessionStore",
    "SessionBusyError",
    "SessionReaper",
    "SessionStore",
    "get_session_store",
    "set_session_store",
]
