import pytest

from src.app.services.password_hasher import PasswordHasher


@pytest.fixture
def hasher():
    return PasswordHasher(rounds=4)


def test_hash_and_verify(hasher):
    password_hash = hasher.hash("Tr0ub4dor&3xyz!")

    assert password_hash.startswith("$2")
    assert hasher.verify("Tr0ub4dor&3xyz!", password_hash)
    assert not hasher.verify("Tr0ub4dor&3xyz?", password_hash)


def test_characters_past_72_bytes_are_checked(hasher):
    password = "Aa1!" + "x" * 81
    password_hash = hasher.hash(password)

    assert hasher.verify(password, password_hash)
    assert not hasher.verify(password[:72] + "completely-different", password_hash)
    assert not hasher.verify(password[:72], password_hash)


def test_multibyte_passwords(hasher):
    password = "Ünïcödé-Pässwörd-" * 6
    password_hash = hasher.hash(password)

    assert hasher.verify(password, password_hash)
    assert not hasher.verify(password[:-1], password_hash)


def test_malformed_stored_hash_fails_closed(hasher):
    assert hasher.verify("anything", "not-a-bcrypt-hash") is False


def test_dummy_check_never_raises(hasher):
    hasher.verify_dummy("whatever the caller typed")
