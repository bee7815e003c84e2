"""Tests for hashing utilities."""

from merse.utils.hashing import HashingService


def test_hash_api_key_is_deterministic_sha256():
    plain_key = "merse_abc123"

    hash1 = HashingService.hash_api_key(plain_key)
    hash2 = HashingService.hash_api_key(plain_key)

    assert hash1 == hash2
    assert len(hash1) == 64
    assert hash1 != HashingService.hash_api_key("merse_abc124")


def test_mask_api_key_keeps_last_six_characters():
    assert HashingService.mask_api_key("merse_0123456789abcdef") == "...abcdef"


def test_mask_api_key_leaves_short_keys():
    assert HashingService.mask_api_key("abc") == "abc"
