"""
Mailbox server — application factory, background eviction and entrypoint.

The master secret is mandatory: startup fails when MAILBOX_SECRET is not
set, rather than encrypting under a throwaway key that the next restart
would forget.
"""
import asyncio
import logging
import contextlib
from typing import Optional

from aiohttp import web

from .handlers import (
    CODEC_KEY,
    STORE_KEY,
    error_middleware,
    post_message,
    get_messages,
    debug_decrypt,
)
from .store import MessageStore
from .vault.config import MailboxConfig
from .vault.crypto import EnvelopeCodec

logger = logging.getLogger("navigator.mailbox")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


async def evict_periodically(store: MessageStore, interval: float) -> None:
    """Sweep expired messages every ``interval`` seconds until cancelled."""
    logger.info("Starting mailbox eviction worker (interval=%ss)", interval)
    while True:
        await asyncio.sleep(interval)
        try:
            store.evict_expired()
        except Exception as err:
            logger.error("Error in mailbox eviction worker: %s", err, exc_info=True)


def create_app(
    config: MailboxConfig,
    store: Optional[MessageStore] = None,
) -> web.Application:
    """Build the mailbox web application.

    Args:
        config: Validated mailbox configuration.
        store: Message store to use; a fresh one honouring
            ``config.retention`` is created when omitted.

    Returns:
        Configured aiohttp application.
    """
    app = web.Application(middlewares=[error_middleware])
    app[CODEC_KEY] = EnvelopeCodec(config.secret)
    if store is None:
        store = MessageStore(retention=config.retention * 1000)
    app[STORE_KEY] = store

    app.router.add_post("/messages", post_message)
    app.router.add_get("/messages/{user_id}", get_messages)
    if config.debug:
        logger.warning("Debug decrypt endpoint is enabled")
        app.router.add_post("/debug/decrypt", debug_decrypt)

    async def eviction_ctx(app: web.Application):
        task = asyncio.create_task(
            evict_periodically(app[STORE_KEY], config.cleanup_interval)
        )
        yield
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    app.cleanup_ctx.append(eviction_ctx)
    return app


def main() -> None:
    """Console entrypoint: configure logging, load settings, serve."""
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    try:
        config = MailboxConfig.from_env()
    except RuntimeError as err:
        logger.critical("Refusing to start: %s", err)
        raise SystemExit(1) from err
    app = create_app(config)
    logger.info("Mailbox listening on %s:%d", config.host, config.port)
    web.run_app(app, host=config.host, port=config.port, print=None)
