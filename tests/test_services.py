"""Tests for the rental catalog and placeholder credentials."""

import re

import bcrypt
import pytest

from rental_bot.store.passwords import (
    hash_password,
    placeholder_email,
    temporary_password,
)
from rental_bot.store.services import (
    OTHER_SERVICE_EMOJI,
    OTHER_SERVICE_RANK,
    get_service_labels,
    match_service_key,
    match_service_label,
    service_emoji,
    service_rank,
)

from tests.conftest import STEAM, VACUUM, WASHER


class TestCatalog:
    def test_labels_map_to_names(self):
        assert [match_service_label(label) for label in get_service_labels()] == [VACUUM, STEAM, WASHER]

    def test_label_must_match_exactly(self):
        assert match_service_label("puzzi 8/1 c vacuum") is None

    @pytest.mark.parametrize("key,name", [("vacuum", VACUUM), ("STEAM", STEAM), (" washer ", WASHER)])
    def test_keys(self, key, name):
        assert match_service_key(key) == name

    def test_unknown_key(self):
        assert match_service_key("drill") is None


class TestRanking:
    @pytest.mark.parametrize("name,rank", [
        (VACUUM, 1),
        (STEAM, 2),
        (WASHER, 3),
        ("Legacy VACUUM bundle", 1),
        ("Trailer rental", OTHER_SERVICE_RANK),
    ])
    def test_rank_by_keyword(self, name, rank):
        assert service_rank(name) == rank

    def test_emoji(self):
        assert service_emoji(VACUUM) == "🧹"
        assert service_emoji("Trailer rental") == OTHER_SERVICE_EMOJI


class TestPasswords:
    def test_hash_is_bcrypt(self):
        hashed = hash_password("temp12345678", rounds=4)
        assert hashed.startswith("$2b$04$")
        assert bcrypt.checkpw(b"temp12345678", hashed.encode())
        assert not bcrypt.checkpw(b"wrong", hashed.encode())

    def test_temporary_password_shape(self):
        password = temporary_password()
        assert re.fullmatch(r"temp[a-z0-9]{8}", password)
        assert temporary_password() != password

    def test_placeholder_email_shape(self):
        email = placeholder_email("clients.test")
        assert re.fullmatch(r"client_\d{6}[a-z0-9]{3}@clients\.test", email)
