"""Background workers for the CRM API."""

from .retention_workers import ArchiveWorker, PurgeWorker

__all__ = ["ArchiveWorker", "PurgeWorker"]
