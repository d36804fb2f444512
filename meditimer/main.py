import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import sentry_sdk

from meditimer.config import Settings, settings
from meditimer.services.alert_service import Alerter
from meditimer.services.kv_backends import KeyValueBackend, create_backend
from meditimer.services.meditation_service import MeditationApp
from meditimer.services.session_store import SessionStore

logger = logging.getLogger(__name__)


def configure_logging(level: str = settings.LOG_LEVEL) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def init_sentry(config: Settings = settings) -> bool:
    if not config.SENTRY_DSN:
        return False
    sentry_sdk.init(
        dsn=config.SENTRY_DSN,
        environment=config.ENVIRONMENT,
        traces_sample_rate=0.2 if config.ENVIRONMENT == "production" else 1.0,
        send_default_pii=False,
    )
    return True


@asynccontextmanager
async def lifespan(
    config: Settings = settings,
    backend: KeyValueBackend | None = None,
    alerter: Alerter | None = None,
) -> AsyncIterator[MeditationApp]:
    """Build a ready-to-use app, with its history already loaded.

    The backend is created from settings unless one is passed in, and is
    closed on exit either way.
    """
    configure_logging(config.LOG_LEVEL)
    init_sentry(config)

    if backend is None:
        backend = create_backend(config)
    store = SessionStore(backend, key=config.SESSIONS_KEY)
    app = MeditationApp(store, alerter=alerter, tick_seconds=config.TICK_SECONDS)

    try:
        # Startup: verify the store is reachable
        await store.ping()
        app.set_minutes(config.DEFAULT_MINUTES)
        await app.refresh_stats()
        logger.info("Meditimer ready (%s storage)", config.STORE_BACKEND)

        yield app
    finally:
        # Shutdown
        await app.shutdown()
        await backend.aclose()
