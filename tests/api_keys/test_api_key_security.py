"""Tests for API key security functions."""

from japi.api_keys.security import (
    API_KEY_LENGTH,
    generate_api_key,
    hash_api_key,
    key_prefix,
    verify_master_key,
)


class TestGenerateApiKey:
    """Tests for key generation."""

    def test_length_and_alphabet(self) -> None:
        key = generate_api_key()
        assert len(key) == API_KEY_LENGTH == 64
        assert key.isalnum()

    def test_keys_are_unique(self) -> None:
        assert len({generate_api_key() for _ in range(50)}) == 50


class TestHashApiKey:
    """Tests for key hashing."""

    def test_deterministic(self) -> None:
        assert hash_api_key("abc") == hash_api_key("abc")

    def test_not_plaintext(self) -> None:
        key = generate_api_key()
        hashed = hash_api_key(key)
        assert hashed != key
        assert len(hashed) == 64

    def test_prefix(self) -> None:
        assert key_prefix("abcdefghijkl") == "abcdefgh"


class TestVerifyMasterKey:
    """Tests for master key verification."""

    def test_correct(self) -> None:
        assert verify_master_key("secret", "secret") is True

    def test_incorrect(self) -> None:
        assert verify_master_key("guess", "secret") is False

    def test_missing_candidate(self) -> None:
        assert verify_master_key(None, "secret") is False

    def test_unset_master_key_never_matches(self) -> None:
        assert verify_master_key("", "") is False
        assert verify_master_key("anything", None) is False
