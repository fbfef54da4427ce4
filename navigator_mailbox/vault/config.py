"""
Mailbox Configuration — Master secret loading and validated settings.

Reads settings from environment variables:
    MAILBOX_SECRET = <master secret, used as raw UTF-8 bytes>
    MAILBOX_RETENTION = <seconds a message is kept, default 600>
    MAILBOX_CLEANUP_INTERVAL = <seconds between eviction sweeps, default 60>
    MAILBOX_HOST / MAILBOX_PORT = <listen address, default 0.0.0.0:3000>
    MAILBOX_DEBUG = <enable the debug decrypt endpoint, default false>

A missing secret is fatal. Envelopes are only decryptable by a process
holding the same secret, so a substituted random value would silently
invalidate every message issued before a restart.

Security Note:
    Never log the secret. Only its length is ever reported.
"""
import os
import base64
import secrets
import logging

from pydantic import BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger("navigator.mailbox")

SECRET_ENV = "MAILBOX_SECRET"
RECOMMENDED_SECRET_SIZE = 32

_TRUTHY = ("1", "true", "yes", "on")


def load_master_secret() -> bytes:
    """Load the master secret from the MAILBOX_SECRET environment variable.

    Returns:
        Secret as raw bytes (UTF-8 encoding of the variable value).

    Raises:
        RuntimeError: If the variable is unset or empty.
    """
    raw = os.environ.get(SECRET_ENV)
    if not raw:
        raise RuntimeError(
            f"{SECRET_ENV} environment variable is not set. "
            f"Set {SECRET_ENV}=<high-entropy value>, e.g. the output of "
            "generate_secret()"
        )
    secret = raw.encode("utf-8")
    if len(secret) < RECOMMENDED_SECRET_SIZE:
        logger.warning(
            "%s is only %d bytes; at least %d bytes of entropy are recommended",
            SECRET_ENV, len(secret), RECOMMENDED_SECRET_SIZE,
        )
    return secret


def _env_int(name: str, default: int) -> int:
    """Read an integer setting, reporting the variable name on bad input."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as err:
        raise RuntimeError(
            f"Invalid mailbox configuration: {name} must be an integer"
        ) from err


def generate_secret() -> str:
    """Generate a random 32-byte secret and return it as base64 string.

    This is a utility for operators provisioning MAILBOX_SECRET.

    Returns:
        Base64-encoded 32-byte secret string.
    """
    return base64.b64encode(secrets.token_bytes(32)).decode("ascii")


class MailboxConfig(BaseModel):
    """Validated mailbox configuration."""

    secret: bytes = Field(repr=False)
    retention: int = Field(default=600, ge=1)
    cleanup_interval: int = Field(default=60, ge=1)
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000, ge=1, le=65535)
    debug: bool = Field(default=False)

    @field_validator("secret")
    @classmethod
    def validate_secret(cls, v: bytes) -> bytes:
        """Reject an empty master secret."""
        if not v:
            raise ValueError("secret cannot be empty")
        return v

    @classmethod
    def from_env(cls) -> "MailboxConfig":
        """Create MailboxConfig by loading values from environment.

        Returns:
            Populated MailboxConfig instance.

        Raises:
            RuntimeError: If MAILBOX_SECRET is missing or any setting is
                not a valid value. Only field names are reported.
        """
        secret = load_master_secret()
        debug = os.environ.get("MAILBOX_DEBUG", "false").lower() in _TRUTHY
        try:
            return cls(
                secret=secret,
                retention=_env_int("MAILBOX_RETENTION", 600),
                cleanup_interval=_env_int("MAILBOX_CLEANUP_INTERVAL", 60),
                host=os.environ.get("MAILBOX_HOST", "0.0.0.0"),
                port=_env_int("MAILBOX_PORT", 3000),
                debug=debug,
            )
        except ValidationError as err:
            fields = sorted({str(e["loc"][0]) for e in err.errors() if e["loc"]})
            raise RuntimeError(
                f"Invalid mailbox configuration: {', '.join(fields)}"
            ) from err
