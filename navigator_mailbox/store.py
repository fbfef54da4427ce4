"""
MessageStore — Ephemeral per-user mailboxes of encrypted envelopes.

Provides the public API for the message store:
- ``store(user_id, envelope)`` — append an envelope to the user's mailbox
- ``retrieve(user_id)`` — snapshot of the mailbox, oldest first
- ``evict_expired(now)`` — drop every message older than the retention window

Envelopes are opaque to the store: it never inspects or validates content.
Nothing is persisted; all mailboxes are lost when the process ends.
"""
import time
import uuid
import logging
import threading
from typing import Callable, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger("navigator.mailbox")

RETENTION_WINDOW = 10 * 60 * 1000  # ten minutes, in milliseconds


def now_ms() -> int:
    """Current wall-clock time as integer epoch milliseconds."""
    return time.time_ns() // 1_000_000


class StoredMessage(BaseModel):
    """One envelope held in a mailbox. Never mutated after creation."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    content: str
    timestamp: int

    model_config = {"frozen": True}


class MessageStore:
    """In-memory mailboxes keyed by user id.

    A single re-entrant lock guards the whole mapping, so a concurrent
    append and eviction can never interleave on the same mailbox.

    Args:
        retention: Retention window in milliseconds.
        clock: Callable returning the current time in epoch milliseconds.
    """

    def __init__(
        self,
        retention: int = RETENTION_WINDOW,
        clock: Callable[[], int] = now_ms,
    ):
        if retention <= 0:
            raise ValueError("retention must be a positive number of milliseconds")
        self._retention = retention
        self._clock = clock
        self._mailboxes: dict[str, list[StoredMessage]] = {}
        self._lock = threading.RLock()

    @property
    def retention(self) -> int:
        return self._retention

    def __len__(self) -> int:
        with self._lock:
            return sum(len(box) for box in self._mailboxes.values())

    def users(self) -> list[str]:
        """List user ids that have a mailbox (possibly empty)."""
        with self._lock:
            return list(self._mailboxes.keys())

    def store(self, user_id: str, envelope: str) -> StoredMessage:
        """Append an envelope to the user's mailbox.

        The mailbox is created on first use.

        Args:
            user_id: Mailbox owner.
            envelope: Opaque encrypted content.

        Returns:
            The newly stored message.
        """
        with self._lock:
            message = StoredMessage(content=envelope, timestamp=self._clock())
            self._mailboxes.setdefault(user_id, []).append(message)
        logger.debug("Mailbox store: user=%s id=%s", user_id, message.id)
        return message

    def retrieve(self, user_id: str) -> list[StoredMessage]:
        """Return the user's messages in insertion order.

        Does not evict. The returned list is a copy; the messages
        themselves are immutable.
        """
        with self._lock:
            return list(self._mailboxes.get(user_id, ()))

    def evict_expired(self, now: Optional[int] = None) -> int:
        """Remove every message whose age has reached the retention window.

        Idempotent: a second call with the same ``now`` removes nothing.

        Args:
            now: Reference time in epoch milliseconds; defaults to the clock.

        Returns:
            Number of messages removed across all mailboxes.
        """
        if now is None:
            now = self._clock()
        evicted = 0
        with self._lock:
            for box in self._mailboxes.values():
                kept = [msg for msg in box if now - msg.timestamp < self._retention]
                evicted += len(box) - len(kept)
                box[:] = kept
        if evicted:
            logger.info("Evicted %d expired message(s)", evicted)
        return evicted
