"""
Mailbox Crypto Core — Per-user key derivation and envelope encryption.

Every message is sealed under a key derived from the process master secret:
    HKDF-SHA256(ikm=secret, salt=user_id, info="messaging") → AES-256-GCM

Envelope wire format (base64 of):
    [nonce 12B][ciphertext][GCM tag 16B]

The layout is a compatibility contract: changing it breaks every envelope
already issued.

Security Note:
    Never log secrets, derived keys, plaintext or envelopes.
    Nonces are random 96-bit; a fresh one is drawn for every encryption.
"""
import os
import base64
import binascii
import logging

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.kdf.hkdf import HKDF
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..exceptions import EncryptionFailed, InvalidPayload, DecryptionFailed

logger = logging.getLogger("navigator.mailbox")

NONCE_SIZE = 12  # 96-bit nonce
TAG_SIZE = 16  # 128-bit GCM tag
KEY_LENGTH = 32  # AES-256
KEY_CONTEXT = "messaging"
MIN_ENVELOPE_SIZE = NONCE_SIZE + TAG_SIZE  # an empty message


# ---------------------------------------------------------------------------
# Key derivation
# ---------------------------------------------------------------------------

def derive_key(secret: bytes, user_id: str) -> bytes:
    """Derive the 32-byte per-user key using HKDF-SHA256.

    Args:
        secret: Process master secret (input key material).
        user_id: User label, used as the HKDF salt.

    Returns:
        32-byte derived key.

    Raises:
        ValueError: If secret or user_id is empty.
    """
    if not secret:
        raise ValueError("Master secret cannot be empty")
    if not user_id:
        raise ValueError("user_id cannot be empty")
    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=user_id.encode("utf-8"),
        info=KEY_CONTEXT.encode("utf-8"),
    )
    return hkdf.derive(secret)


# ---------------------------------------------------------------------------
# Envelope encryption
# ---------------------------------------------------------------------------

def encrypt_message(secret: bytes, user_id: str, message: str) -> str:
    """Seal a text message into a base64 envelope for ``user_id``.

    Args:
        secret: Process master secret.
        user_id: Recipient label the key is bound to.
        message: Plaintext to encrypt.

    Returns:
        base64(nonce || ciphertext || tag).

    Raises:
        ValueError: If secret or user_id is empty.
        EncryptionFailed: On any cipher or random-source failure.
    """
    key = derive_key(secret, user_id)
    try:
        nonce = os.urandom(NONCE_SIZE)
        # AESGCM appends the tag to the ciphertext: ct || tag
        sealed = AESGCM(key).encrypt(nonce, message.encode("utf-8"), None)
    except Exception as err:
        raise EncryptionFailed(
            f"Encryption failed: {type(err).__name__}"
        ) from err
    return base64.b64encode(nonce + sealed).decode("ascii")


def _decode_envelope(envelope: str) -> bytes:
    try:
        payload = base64.b64decode(envelope, validate=True)
    except (binascii.Error, ValueError, TypeError) as err:
        raise InvalidPayload("Invalid payload encoding") from err
    if len(payload) < MIN_ENVELOPE_SIZE:
        raise InvalidPayload(
            f"Invalid payload length: {len(payload)} bytes "
            f"(minimum {MIN_ENVELOPE_SIZE})"
        )
    return payload


def decrypt_message(secret: bytes, user_id: str, envelope: str) -> str:
    """Open a base64 envelope sealed for ``user_id``.

    The GCM tag is verified before any plaintext is released; a wrong
    user_id is indistinguishable from tampering.

    Args:
        secret: Process master secret.
        user_id: Same label used at encryption time.
        envelope: base64(nonce || ciphertext || tag).

    Returns:
        The original message text.

    Raises:
        ValueError: If secret or user_id is empty.
        InvalidPayload: If the envelope is not base64 or shorter than 28 bytes.
        DecryptionFailed: On tag mismatch, corruption or a wrong key.
    """
    key = derive_key(secret, user_id)
    payload = _decode_envelope(envelope)
    nonce = payload[:NONCE_SIZE]
    ciphertext = payload[NONCE_SIZE:len(payload) - TAG_SIZE]
    tag = payload[len(payload) - TAG_SIZE:]
    try:
        plaintext = AESGCM(key).decrypt(nonce, ciphertext + tag, None)
        return plaintext.decode("utf-8")
    except (InvalidTag, UnicodeDecodeError, ValueError) as err:
        raise DecryptionFailed() from err


class EnvelopeCodec:
    """Envelope codec bound to the process master secret.

    Holds nothing but the immutable secret, so a single instance can be
    shared across threads and request handlers.
    """

    __slots__ = ("_secret",)

    def __init__(self, secret: bytes):
        if not secret:
            raise ValueError("Master secret cannot be empty")
        self._secret = bytes(secret)

    def __repr__(self) -> str:
        return "<EnvelopeCodec secret=***>"

    def encrypt(self, user_id: str, message: str) -> str:
        """Encrypt ``message`` for ``user_id``; see :func:`encrypt_message`."""
        return encrypt_message(self._secret, user_id, message)

    def decrypt(self, user_id: str, envelope: str) -> str:
        """Decrypt ``envelope`` for ``user_id``; see :func:`decrypt_message`."""
        return decrypt_message(self._secret, user_id, envelope)
