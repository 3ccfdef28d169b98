from __future__ import annotations

import pytest

from intake.credentials import CredentialStore
from intake.errors import ValidationError


@pytest.fixture
def credentials(database):
    store = CredentialStore(database)
    store.ensure_table()
    return store


def test_passwords_are_stored_as_bcrypt_hashes(credentials, database):
    credentials.create_user("seller", "s3cret-pass")

    row = database.fetch_one('SELECT "password_hash" FROM "users" WHERE "username" = ?', ["seller"])
    assert row["password_hash"] != "s3cret-pass"
    assert row["password_hash"].startswith("$2")


def test_verify_credentials(credentials):
    credentials.create_user("seller", "s3cret-pass")

    assert credentials.verify_credentials("seller", "s3cret-pass") is True
    assert credentials.verify_credentials(" seller ", "s3cret-pass") is True
    assert credentials.verify_credentials("seller", "wrong") is False
    assert credentials.verify_credentials("nobody", "s3cret-pass") is False
    assert credentials.verify_credentials("", "") is False


def test_duplicate_usernames_are_rejected(credentials):
    credentials.create_user("seller", "one")

    with pytest.raises(ValidationError, match="already exists"):
        credentials.create_user("seller", "two")


def test_blank_credentials_cannot_be_registered(credentials):
    with pytest.raises(ValidationError):
        credentials.create_user("  ", "pw")
