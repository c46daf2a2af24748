"""Tests for log processors and request context."""

import pytest

from japi.core.context import (
    clear_context,
    get_context,
    set_key_domain,
    set_request_id,
)
from japi.core.logging import add_context_processor, filter_sensitive_data, mask_value


@pytest.fixture(autouse=True)
def _clean_context():
    clear_context()
    yield
    clear_context()


class TestMaskValue:
    """Tests for sensitive value masking."""

    def test_api_key_masked(self) -> None:
        assert mask_value("api_key", "abcdefgh") == "ab****gh"

    def test_short_secret_fully_hidden(self) -> None:
        assert mask_value("master_key", "abc") == "***"

    def test_case_insensitive_name(self) -> None:
        assert mask_value("masterKey", "supersecret") != "supersecret"

    def test_other_keys_untouched(self) -> None:
        assert mask_value("domain", "example.com") == "example.com"

    def test_nested_dict(self) -> None:
        masked = mask_value("params", {"apiKey": "abcdefgh", "url": "https://x.com"})
        assert masked == {"apiKey": "ab****gh", "url": "https://x.com"}

    def test_non_strings_untouched(self) -> None:
        assert mask_value("token", 12345) == 12345


class TestProcessors:
    """Tests for the processors wired into structlog."""

    def test_filter_sensitive_data(self) -> None:
        event = filter_sensitive_data(
            None, "info", {"event": "x", "master_key": "topsecret"}
        )
        assert event["event"] == "x"
        assert event["master_key"] == "to*****et"

    def test_context_added(self) -> None:
        set_request_id("req-1")
        set_key_domain("example.com")

        event = add_context_processor(None, "info", {"event": "x"})

        assert event["request_id"] == "req-1"
        assert event["key_domain"] == "example.com"

    def test_unset_values_left_out(self) -> None:
        set_request_id("req-1")

        assert get_context() == {"request_id": "req-1"}

    def test_generated_request_id(self) -> None:
        request_id = set_request_id(None)

        assert request_id
        assert get_context()["request_id"] == request_id
