"""Structured encoding of component custom ids.

A custom id is `kind` or `kind:key`. Kinds are matched exactly after
splitting on the first delimiter, so no kind can shadow another.
"""

from dataclasses import dataclass
from enum import Enum

DELIMITER = ":"
MAX_CUSTOM_ID_LENGTH = 100


class ComponentKind(str, Enum):
    ACCEPT_BUTTON = "accept_button"
    SELECT_CHOICE = "select_choice"
    START_SIM = "start_sim"
    BUY = "buy"
    SELL = "sell"
    SIM_PRICE = "sim_price"


class InvalidComponentIdError(ValueError):
    """Raised for custom ids that cannot be encoded or decoded."""


@dataclass(frozen=True)
class ComponentId:
    kind: ComponentKind
    key: str | None = None

    def encode(self) -> str:
        return encode_custom_id(self.kind, self.key)


def encode_custom_id(kind: ComponentKind, key: str | None = None) -> str:
    if key is None:
        custom_id = kind.value
    elif not key:
        raise InvalidComponentIdError("Session key cannot be empty")
    else:
        custom_id = f"{kind.value}{DELIMITER}{key}"

    if len(custom_id) > MAX_CUSTOM_ID_LENGTH:
        raise InvalidComponentIdError(
            f"Custom id exceeds {MAX_CUSTOM_ID_LENGTH} characters: {custom_id[:20]}..."
        )
    return custom_id


def decode_custom_id(custom_id: str) -> ComponentId:
    """Decode a custom id received from the platform.

    Raises:
        InvalidComponentIdError: If the kind is unknown or the key is empty.
    """
    raw_kind, sep, key = custom_id.partition(DELIMITER)
    try:
        kind = ComponentKind(raw_kind)
    except ValueError:
        raise InvalidComponentIdError(f"Unknown component kind: {raw_kind!r}") from None

    if sep and not key:
        raise InvalidComponentIdError(f"Empty session key in {custom_id!r}")
    return ComponentId(kind=kind, key=key if sep else None)
