"""Application start-up orchestration for the client store."""

import logging

from naapbook.application.services import ClientStore
from naapbook.config import Settings, get_settings
from naapbook.infrastructure.dependencies import build_client_store, get_client_store
from naapbook.infrastructure.logging.log_config import setup_logging

logger = logging.getLogger(__name__)


async def startup(settings: Settings | None = None) -> ClientStore:
    """Configure logging, build the store and run the legacy migration once.

    With explicit ``settings`` a fresh store is built; otherwise the cached
    process-wide store is used.
    """
    if settings is None:
        settings = get_settings()
        store = get_client_store()
    else:
        store = build_client_store(settings)

    setup_logging(settings)
    report = await store.migrate()
    if report.legacy_found:
        logger.info(
            "Legacy client data migrated: %d copied, %d skipped",
            report.copied,
            report.skipped,
        )
    logger.info("%s v%s ready (backend=%s)", settings.app_title, settings.app_version, settings.storage_backend)
    return store
