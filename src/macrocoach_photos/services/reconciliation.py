"""Out-of-band sweep for remote uploads that never reached the ledger."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol

from macrocoach_photos.domain.storage import SweepReport, UploadIntent
from macrocoach_photos.services.backends import BackendAdapter, find_backend
from macrocoach_photos.services.ledger import PhotoLedger

_logger = logging.getLogger(__name__)


class UploadJournal(Protocol):
    """Records remote uploads between the upload and the ledger write."""

    def record_intent(self, intent: UploadIntent) -> None:
        """Persist a pending intent."""

    def clear(self, identity: str) -> None:
        """Remove a pending intent."""

    def list_intents(self) -> list[UploadIntent]:
        """Return all pending intents."""


@dataclass
class ReconciliationService:
    """Deletes orphaned remote objects left behind by interrupted uploads.

    An intent is written after a backend accepts the bytes and cleared once
    the ledger entry exists. Intents that outlive the grace period without a
    matching ledger entry point at remote objects nobody references.
    """

    journal: UploadJournal
    ledger: PhotoLedger
    backends: list[BackendAdapter]
    grace_period: timedelta = timedelta(hours=1)

    async def sweep_orphans(self, grace: timedelta | None = None) -> SweepReport:
        """Resolve stale intents and return a summary of the pass."""
        window = grace if grace is not None else self.grace_period
        cutoff = datetime.now(tz=UTC) - window
        outcomes = {"cleared": 0, "deleted": 0, "failed": 0}
        checked = 0
        for intent in self.journal.list_intents():
            if intent.created_at > cutoff:
                continue
            checked += 1
            try:
                outcome = await self._resolve(intent)
            except Exception:
                _logger.exception("Could not resolve upload intent %s", intent.identity)
                outcome = "failed"
            outcomes[outcome] += 1
        return SweepReport(checked=checked, **outcomes)

    async def _resolve(self, intent: UploadIntent) -> str:
        if self.ledger.get_record(intent.identity) is not None:
            self.journal.clear(intent.identity)
            return "cleared"
        backend = find_backend(self.backends, intent.backend, intent.remote_url)
        if backend is None:
            _logger.warning(
                "No backend %s to remove orphan %s", intent.backend, intent.remote_url
            )
            return "failed"
        if not await backend.delete(intent.remote_url):
            return "failed"
        _logger.info("Removed orphaned %s object %s", backend.name, intent.remote_url)
        self.journal.clear(intent.identity)
        return "deleted"
