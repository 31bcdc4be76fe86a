"""Background workers applying the data retention policy."""

from ..core.database import async_session_factory
from ..core.observability import get_logger
from ..services.retention_service import RetentionService
from .base import BaseWorker

logger = get_logger(__name__)


class ArchiveWorker(BaseWorker):
    """
    Archives clients with no activity inside the retention window.

    Runs across all tenants, once a day by default.
    """

    def __init__(self, interval_seconds: int = 24 * 3600):
        super().__init__(name="RetentionArchive", interval_seconds=interval_seconds)

    async def process(self) -> None:
        async with async_session_factory() as db:
            try:
                result = await RetentionService(db).run_archive()
                if result.clients_archived:
                    logger.info(
                        "Inactive clients archived",
                        worker=self.name,
                        clients_archived=result.clients_archived,
                    )
            except Exception as e:
                await db.rollback()
                logger.error("Error archiving inactive clients", worker=self.name, error=str(e))
                raise


class PurgeWorker(BaseWorker):
    """
    Deletes audit logs, idempotency keys and dead leads past their windows.

    Runs across all tenants, once a week by default.
    """

    def __init__(self, interval_seconds: int = 7 * 24 * 3600):
        super().__init__(name="RetentionPurge", interval_seconds=interval_seconds)

    async def process(self) -> None:
        async with async_session_factory() as db:
            try:
                result = await RetentionService(db).run_purge()
                logger.info("Retention purge finished", worker=self.name, **result.model_dump())
            except Exception as e:
                await db.rollback()
                logger.error("Error purging expired records", worker=self.name, error=str(e))
                raise
