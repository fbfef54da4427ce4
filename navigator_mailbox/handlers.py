"""
HTTP handlers for the mailbox.

Routes:
    POST /messages              {userId, message}   → encrypt and store
    GET  /messages/{user_id}                        → evict, read, decrypt
    POST /debug/decrypt         {userId, encrypted} → decrypt one envelope

Typed failures are turned into ``{"error": {"code", "message"}}`` bodies by
:func:`error_middleware`; nothing else about a failure reaches the client.
"""
import logging
from typing import Any

import orjson
from aiohttp import web

from .exceptions import (
    MailboxError,
    BadRequest,
    EncryptionFailed,
    InvalidPayload,
    DecryptionFailed,
)
from .store import MessageStore
from .vault.crypto import EnvelopeCodec

logger = logging.getLogger("navigator.mailbox")

CODEC_KEY = web.AppKey("mailbox_codec", EnvelopeCodec)
STORE_KEY = web.AppKey("mailbox_store", MessageStore)

ERROR_STATUS: dict[str, int] = {
    BadRequest.code: 400,
    InvalidPayload.code: 400,
    DecryptionFailed.code: 422,
    EncryptionFailed.code: 500,
}


def json_response(data: Any, status: int = 200) -> web.Response:
    """Serialize ``data`` with orjson into an application/json response."""
    return web.Response(
        body=orjson.dumps(data),
        status=status,
        content_type="application/json",
    )


@web.middleware
async def error_middleware(request: web.Request, handler) -> web.StreamResponse:
    try:
        return await handler(request)
    except MailboxError as err:
        status = ERROR_STATUS.get(err.code, 500)
        logger.warning(
            "%s %s failed: code=%s status=%d",
            request.method, request.path, err.code, status,
        )
        return json_response({"error": err.to_dict()}, status=status)


async def _read_fields(request: web.Request, *names: str) -> list[str]:
    """Parse a JSON body and return the named non-empty string fields."""
    try:
        body = orjson.loads(await request.read())
    except orjson.JSONDecodeError as err:
        raise BadRequest("Request body must be valid JSON") from err
    if not isinstance(body, dict):
        raise BadRequest("Request body must be a JSON object")
    values = [body.get(name) for name in names]
    if not all(isinstance(v, str) and v for v in values):
        raise BadRequest(f"{' and '.join(names)} are required")
    return values


async def post_message(request: web.Request) -> web.Response:
    user_id, message = await _read_fields(request, "userId", "message")
    envelope = request.app[CODEC_KEY].encrypt(user_id, message)
    stored = request.app[STORE_KEY].store(user_id, envelope)
    logger.info("Message stored for user=%s", user_id)
    return json_response(
        {"status": "Message stored successfully", "id": stored.id},
        status=201,
    )


async def get_messages(request: web.Request) -> web.Response:
    """Return the user's live messages, decrypted, oldest first."""
    user_id = request.match_info["user_id"]
    store = request.app[STORE_KEY]
    codec = request.app[CODEC_KEY]
    store.evict_expired()
    messages = [
        {
            "id": msg.id,
            "message": codec.decrypt(user_id, msg.content),
            "timestamp": msg.timestamp,
        }
        for msg in store.retrieve(user_id)
    ]
    return json_response(messages)


async def debug_decrypt(request: web.Request) -> web.Response:
    user_id, encrypted = await _read_fields(request, "userId", "encrypted")
    decrypted = request.app[CODEC_KEY].decrypt(user_id, encrypted)
    return json_response({"decrypted": decrypted})
