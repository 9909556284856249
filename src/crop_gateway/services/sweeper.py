"""Housekeeping for expired crop sessions."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from crop_gateway.services.sessions import CropSessionRepository

_logger = logging.getLogger(__name__)


@dataclass
class CropSessionSweeper:
    """Deletes expired sessions to reclaim storage.

    Authorization re-checks expiry on every use, so how often (or whether)
    this runs never affects correctness.
    """

    repository: CropSessionRepository

    def sweep(self, now: datetime | None = None) -> int:
        """Delete sessions that expired before `now` and return how many."""
        cutoff = now or datetime.now(tz=UTC)
        deleted = self.repository.delete_expired(cutoff)
        if deleted:
            _logger.info("Swept %s expired crop sessions", deleted)
        return deleted

    async def run_forever(self, interval_seconds: float) -> None:
        """Sweep on a fixed interval until cancelled."""
        while True:
            try:
                await asyncio.to_thread(self.sweep)
            except Exception:
                _logger.exception("Crop session sweep failed")
            await asyncio.sleep(interval_seconds)
