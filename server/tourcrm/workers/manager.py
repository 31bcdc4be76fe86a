"""Worker manager for coordinating background tasks."""

import asyncio
import logging
from typing import Dict

from ..core.config import settings
from .base import BaseWorker
from .retention_workers import ArchiveWorker, PurgeWorker

logger = logging.getLogger(__name__)


class WorkerManager:
    """
    Manages background workers for the application.

    Coordinates starting, stopping, and monitoring of all background workers.
    """

    def __init__(self):
        self.workers: Dict[str, BaseWorker] = {}
        self._setup_workers()

    def _setup_workers(self) -> None:
        """Initialize all workers."""
        self.workers["retention_archive"] = ArchiveWorker(interval_seconds=settings.archive_interval_seconds)
        self.workers["retention_purge"] = PurgeWorker(interval_seconds=settings.purge_interval_seconds)

        logger.info(f"Initialized {len(self.workers)} workers")

    async def start_all(self) -> None:
        """Start all workers unless disabled by settings."""
        if not settings.enable_workers:
            logger.info("Background workers disabled by settings")
            return

        logger.info("Starting all workers")

        for name, worker in self.workers.items():
            try:
                await worker.start()
                logger.info(f"Started worker: {name}")
            except Exception as e:
                logger.error(f"Failed to start worker {name}: {str(e)}", exc_info=True)

        logger.info(f"Started {len(self.workers)} workers")

    async def stop_all(self) -> None:
        """Stop all running workers gracefully."""
        running = {name: worker for name, worker in self.workers.items() if worker.is_running}
        if not running:
            return

        logger.info("Stopping all workers")
        results = await asyncio.gather(
            *(worker.stop() for worker in running.values()), return_exceptions=True
        )

        for name, result in zip(running.keys(), results):
            if isinstance(result, Exception):
                logger.error(f"Error stopping worker {name}: {str(result)}")
            else:
                logger.info(f"Stopped worker: {name}")

        logger.info("All workers stopped")

    def get_worker(self, name: str) -> BaseWorker:
        """
        Get a specific worker by name.

        Raises:
            KeyError: If worker not found
        """
        return self.workers[name]

    def get_worker_status(self) -> Dict[str, bool]:
        """Map worker names to their running status."""
        return {name: worker.is_running for name, worker in self.workers.items()}


# Global worker manager instance
worker_manager = WorkerManager()
