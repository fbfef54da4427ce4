"""
Mailbox error types.

Every failure raised by the envelope codec is one of a closed set of
variants, each carrying a stable ``code`` and a fixed, non-sensitive message.
The underlying exception is chained for in-process debugging only.
"""


class MailboxError(Exception):
    """Base class for all mailbox failures."""

    code: str = "mailbox_error"
    default_message: str = "Mailbox operation failed"

    def __init__(self, message: str | None = None, code: str | None = None):
        self.message = message or self.default_message
        if code is not None:
            self.code = code
        super().__init__(self.message)

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class EncryptionFailed(MailboxError):
    """Cipher or random-source failure while sealing an envelope."""

    code = "encryption_failed"
    default_message = "Encryption failed"


class InvalidPayload(MailboxError):
    """Envelope is not decodable or shorter than the minimum frame."""

    code = "invalid_payload"
    default_message = "Invalid payload length"


class DecryptionFailed(MailboxError):
    """Authentication failed: tampered envelope, wrong user, or wrong key.

    The message is deliberately identical for every cause.
    """

    code = "decryption_failed"
    default_message = "Decryption failed"


class BadRequest(MailboxError):
    """Malformed or incomplete request body."""

    code = "bad_request"
    default_message = "Bad request"
