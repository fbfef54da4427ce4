"""
Tests for MailboxConfig and master secret loading.
"""
import base64
import logging

import pytest
from pydantic import ValidationError

from navigator_mailbox.vault.config import (
    MailboxConfig,
    generate_secret,
    load_master_secret,
)

_ENV_VARS = (
    "MAILBOX_SECRET",
    "MAILBOX_RETENTION",
    "MAILBOX_CLEANUP_INTERVAL",
    "MAILBOX_HOST",
    "MAILBOX_PORT",
    "MAILBOX_DEBUG",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestLoadMasterSecret:
    """Tests for reading MAILBOX_SECRET."""

    def test_missing_secret_is_fatal(self):
        """No random fallback is ever substituted."""
        with pytest.raises(RuntimeError, match="MAILBOX_SECRET"):
            load_master_secret()

    def test_empty_secret_is_fatal(self, monkeypatch):
        monkeypatch.setenv("MAILBOX_SECRET", "")
        with pytest.raises(RuntimeError):
            load_master_secret()

    def test_secret_is_utf8_bytes(self, monkeypatch):
        monkeypatch.setenv("MAILBOX_SECRET", "x" * 40)
        assert load_master_secret() == b"x" * 40

    def test_short_secret_warns_without_value(self, monkeypatch, caplog):
        monkeypatch.setenv("MAILBOX_SECRET", "s3cr3t")
        with caplog.at_level(logging.WARNING, logger="navigator.mailbox"):
            assert load_master_secret() == b"s3cr3t"
        assert "6 bytes" in caplog.text
        assert "s3cr3t" not in caplog.text

    def test_generate_secret(self):
        first = generate_secret()
        assert len(base64.b64decode(first)) == 32
        assert first != generate_secret()


class TestMailboxConfig:
    """Tests for the validated configuration model."""

    def test_defaults_from_env(self, monkeypatch):
        monkeypatch.setenv("MAILBOX_SECRET", generate_secret())
        config = MailboxConfig.from_env()
        assert config.retention == 600
        assert config.cleanup_interval == 60
        assert config.host == "0.0.0.0"
        assert config.port == 3000
        assert config.debug is False

    def test_overrides_from_env(self, monkeypatch):
        monkeypatch.setenv("MAILBOX_SECRET", "abc")
        monkeypatch.setenv("MAILBOX_RETENTION", "30")
        monkeypatch.setenv("MAILBOX_CLEANUP_INTERVAL", "5")
        monkeypatch.setenv("MAILBOX_HOST", "127.0.0.1")
        monkeypatch.setenv("MAILBOX_PORT", "8080")
        monkeypatch.setenv("MAILBOX_DEBUG", "true")
        config = MailboxConfig.from_env()
        assert config.secret == b"abc"
        assert config.retention == 30
        assert config.cleanup_interval == 5
        assert config.host == "127.0.0.1"
        assert config.port == 8080
        assert config.debug is True

    def test_from_env_without_secret(self):
        with pytest.raises(RuntimeError):
            MailboxConfig.from_env()

    def test_empty_secret_rejected(self):
        with pytest.raises(ValidationError):
            MailboxConfig(secret=b"")

    @pytest.mark.parametrize("field,value", [
        ("retention", 0),
        ("cleanup_interval", 0),
        ("port", 70000),
    ])
    def test_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            MailboxConfig(secret=b"abc", **{field: value})

    def test_repr_hides_secret(self):
        config = MailboxConfig(secret=b"top-secret-value")
        assert "top-secret-value" not in repr(config)


class TestInvalidSettings:
    """Bad settings fail as RuntimeError naming the setting, never the secret."""

    @pytest.fixture(autouse=True)
    def secret(self, monkeypatch):
        monkeypatch.setenv("MAILBOX_SECRET", "x" * 40)

    @pytest.mark.parametrize("name", [
        "MAILBOX_RETENTION",
        "MAILBOX_CLEANUP_INTERVAL",
        "MAILBOX_PORT",
    ])
    def test_non_integer(self, monkeypatch, name):
        monkeypatch.setenv(name, "ten")
        with pytest.raises(RuntimeError, match=name) as exc:
            MailboxConfig.from_env()
        assert "x" * 40 not in str(exc.value)

    @pytest.mark.parametrize("name,value,field", [
        ("MAILBOX_RETENTION", "0", "retention"),
        ("MAILBOX_CLEANUP_INTERVAL", "-5", "cleanup_interval"),
        ("MAILBOX_PORT", "99999", "port"),
    ])
    def test_out_of_range(self, monkeypatch, name, value, field):
        monkeypatch.setenv(name, value)
        with pytest.raises(RuntimeError, match=field) as exc:
            MailboxConfig.from_env()
        assert isinstance(exc.value.__cause__, ValidationError)
        assert "x" * 40 not in str(exc.value)
