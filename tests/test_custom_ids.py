"""Tests for structured component custom ids."""

import pytest

from app.services.interactions.custom_ids import (
    MAX_CUSTOM_ID_LENGTH,
    ComponentId,
    ComponentKind,
    InvalidComponentIdError,
    decode_custom_id,
    encode_custom_id,
)


class TestEncode:
    def test_kind_and_key(self):
        assert encode_custom_id(ComponentKind.ACCEPT_BUTTON, "123") == "accept_button:123"

    def test_kind_without_key(self):
        assert encode_custom_id(ComponentKind.START_SIM) == "start_sim"

    def test_empty_key_rejected(self):
        with pytest.raises(InvalidComponentIdError):
            encode_custom_id(ComponentKind.BUY, "")

    def test_too_long_rejected(self):
        with pytest.raises(InvalidComponentIdError, match="exceeds"):
            encode_custom_id(ComponentKind.SELECT_CHOICE, "x" * MAX_CUSTOM_ID_LENGTH)


class TestDecode:
    def test_decodes_what_was_encoded(self):
        component_id = ComponentId(ComponentKind.SELECT_CHOICE, "900000000000000001")
        assert decode_custom_id(component_id.encode()) == component_id

    def test_keyless_kind(self):
        assert decode_custom_id("start_sim") == ComponentId(ComponentKind.START_SIM, None)

    def test_kinds_are_matched_exactly(self):
        """A kind followed by extra characters is not that kind."""
        with pytest.raises(InvalidComponentIdError, match="Unknown component kind"):
            decode_custom_id("start_sim123")
        with pytest.raises(InvalidComponentIdError):
            decode_custom_id("accept_button_123")

    def test_key_may_contain_delimiter(self):
        assert decode_custom_id("buy:a:b").key == "a:b"

    def test_empty_key_rejected(self):
        with pytest.raises(InvalidComponentIdError, match="Empty session key"):
            decode_custom_id("sell:")

    def test_unknown_kind(self):
        with pytest.raises(InvalidComponentIdError):
            decode_custom_id("button1")
