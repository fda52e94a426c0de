"""Unit tests for bcrypt password hashing."""

from src.bl_gateway.auth.password import hash_password, verify_password


def test_hash_is_not_plaintext() -> None:
    hashed = hash_password("Secret#123")
    assert hashed != "Secret#123"
    assert hashed.startswith("$2")


def test_verify_correct_password() -> None:
    assert verify_password("Secret#123", hash_password("Secret#123"))


def test_verify_wrong_password() -> None:
    assert not verify_password("Wrong#123", hash_password("Secret#123"))


def test_salts_differ() -> None:
    assert hash_password("Secret#123") != hash_password("Secret#123")


def test_malformed_hash_never_matches() -> None:
    assert not verify_password("Secret#123", "not-a-bcrypt-hash")
