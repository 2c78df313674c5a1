"""Background task that reclaims abandoned uploads."""

import asyncio
from datetime import datetime, timedelta
from typing import List, Optional

from common.logging_config import get_logger
from upload_server.config import CLEANUP_INTERVAL_SECONDS, RETENTION_SECONDS
from upload_server.services.upload_service import UploadService
from upload_server.utils import utc_now

logger = get_logger(__name__)


class UploadJanitor:
    """
    Background task that periodically deletes uploads idle past the retention window.
    """

    def __init__(
        self,
        upload_service: UploadService,
        interval_seconds: int = CLEANUP_INTERVAL_SECONDS,
        retention_seconds: int = RETENTION_SECONDS,
    ):
        """
        Initialize janitor task.

        Args:
            upload_service: Session manager owning the identifier locks
            interval_seconds: Time between sweeps (default 1 hour)
            retention_seconds: Idle time after which an upload is reclaimed (default 24 hours)
        """
        self.upload_service = upload_service
        self.interval_seconds = interval_seconds
        self.retention_seconds = retention_seconds
        self._running = False
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start the background sweep task."""
        if self._running:
            logger.warning("Janitor task already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._run())
        logger.info(
            f"Started upload janitor (interval: {self.interval_seconds}s, retention: {self.retention_seconds}s)"
        )

    async def stop(self) -> None:
        """Stop the background sweep task."""
        if not self._running:
            return

        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        logger.info("Stopped upload janitor")

    async def _run(self) -> None:
        """Main loop for the janitor task."""
        while self._running:
            try:
                await asyncio.sleep(self.interval_seconds)

                if not self._running:
                    break

                await asyncio.to_thread(self.sweep)

            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in janitor task: {e}", exc_info=True)

    def sweep(self, now: Optional[datetime] = None) -> List[str]:
        """
        Execute one sweep.

        Args:
            now: Reference time (defaults to current UTC time)

        Returns:
            Identifiers whose session was removed
        """
        now = now or utc_now()
        cutoff = now - timedelta(seconds=self.retention_seconds)

        session_repo = self.upload_service.session_repo
        chunk_writer = self.upload_service.chunk_writer

        file_ids = session_repo.list_ids()
        logger.debug(f"Starting janitor sweep over {len(file_ids)} sessions [cutoff={cutoff.isoformat()}]")

        removed = []
        for file_id in file_ids:
            try:
                if self.upload_service.delete_if_stale(file_id, cutoff):
                    removed.append(file_id)
            except Exception as e:
                logger.warning(f"Error reclaiming upload {file_id}: {e}")

        orphans = 0
        for file_id in chunk_writer.list_ids():
            try:
                if self.upload_service.delete_orphaned_image(file_id, cutoff.timestamp()):
                    orphans += 1
            except Exception as e:
                logger.warning(f"Error removing orphaned byte image {file_id}: {e}")

        if removed or orphans:
            logger.info(f"Janitor sweep complete: {len(removed)} stale uploads and {orphans} orphaned images removed")
        else:
            logger.debug("Janitor sweep complete: nothing to remove")

        return removed
