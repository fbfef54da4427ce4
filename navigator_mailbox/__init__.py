"""Navigator Mailbox.

Short-lived, per-user encrypted messages kept in process memory.
"""
from .version import __version__
from .exceptions import (
    MailboxError,
    EncryptionFailed,
    InvalidPayload,
    DecryptionFailed,
)
from .store import MessageStore, StoredMessage
from .vault import EnvelopeCodec, MailboxConfig

__all__ = [
    "__version__",
    "MailboxError",
    "EncryptionFailed",
    "InvalidPayload",
    "DecryptionFailed",
    "MessageStore",
    "StoredMessage",
    "EnvelopeCodec",
    "MailboxConfig",
]
