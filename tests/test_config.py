"""Tests for configuration loading and validation."""

from dataclasses import replace

import pytest

from rental_bot.config import (
    AppConfig,
    CommitConfig,
    SessionConfig,
    _safe_bool,
    _safe_int,
    _validate_config,
)


class TestConfigValidation:
    def test_default_config_passes_validation(self):
        _validate_config(AppConfig())  # should not raise

    def test_single_email_attempt_rejected(self):
        config = replace(AppConfig(), commit=CommitConfig(email_collision_attempts=1))
        with pytest.raises(ValueError, match="EMAIL_COLLISION_ATTEMPTS"):
            _validate_config(config)

    @pytest.mark.parametrize("rounds", [3, 17])
    def test_hash_rounds_out_of_range(self, rounds):
        config = replace(AppConfig(), commit=CommitConfig(password_hash_rounds=rounds))
        with pytest.raises(ValueError, match="PASSWORD_HASH_ROUNDS"):
            _validate_config(config)

    @pytest.mark.parametrize("domain", ["", "x@clients.local"])
    def test_bad_placeholder_domain(self, domain):
        config = replace(AppConfig(), commit=CommitConfig(placeholder_email_domain=domain))
        with pytest.raises(ValueError, match="PLACEHOLDER_EMAIL_DOMAIN"):
            _validate_config(config)

    def test_negative_idle_timeout(self):
        config = replace(AppConfig(), session=SessionConfig(idle_timeout_sec=-5))
        with pytest.raises(ValueError, match="SESSION_IDLE_TIMEOUT_SEC"):
            _validate_config(config)

    def test_recent_clients_limit(self):
        config = replace(AppConfig(), recent_clients_limit=0)
        with pytest.raises(ValueError, match="RECENT_CLIENTS_LIMIT"):
            _validate_config(config)

    def test_config_is_frozen(self):
        config = AppConfig()
        with pytest.raises(AttributeError):
            config.recent_clients_limit = 3


class TestEnvParsing:
    def test_safe_int(self, monkeypatch):
        monkeypatch.setenv("RENTAL_TEST_INT", "42")
        assert _safe_int("RENTAL_TEST_INT", "0") == 42

    def test_safe_int_default(self, monkeypatch):
        monkeypatch.delenv("RENTAL_TEST_INT", raising=False)
        assert _safe_int("RENTAL_TEST_INT", "7") == 7

    def test_safe_int_names_variable_on_error(self, monkeypatch):
        monkeypatch.setenv("RENTAL_TEST_INT", "ten")
        with pytest.raises(ValueError, match="RENTAL_TEST_INT"):
            _safe_int("RENTAL_TEST_INT", "0")

    @pytest.mark.parametrize("raw,expected", [
        ("1", True), ("true", True), ("YES", True), (" on ", True),
        ("0", False), ("false", False), ("", False),
    ])
    def test_safe_bool(self, monkeypatch, raw, expected):
        monkeypatch.setenv("RENTAL_TEST_BOOL", raw)
        assert _safe_bool("RENTAL_TEST_BOOL", "false") is expected
