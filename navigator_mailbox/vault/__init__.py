"""Mailbox Vault — Per-user authenticated encryption of messages.

Security Note (Threat Model):
    The master secret lives in process memory for the process lifetime.
    Anyone holding it can derive every user's key; the user_id is a label,
    not a verified identity. Caller authentication is out of scope.
"""

from .crypto import (
    EnvelopeCodec,
    derive_key,
    encrypt_message,
    decrypt_message,
)
from .config import MailboxConfig, load_master_secret, generate_secret

__all__ = [
    "EnvelopeCodec",
    "derive_key",
    "encrypt_message",
    "decrypt_message",
    "MailboxConfig",
    "load_master_secret",
    "generate_secret",
]
