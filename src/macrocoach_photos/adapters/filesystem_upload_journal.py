"""Filesystem journal of remote uploads awaiting their ledger entry."""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from macrocoach_photos.domain.storage import UploadIntent
from macrocoach_photos.services.reconciliation import UploadJournal

_logger = logging.getLogger(__name__)


@dataclass
class FilesystemUploadJournal(UploadJournal):
    """One JSON file per pending upload intent."""

    directory: Path

    def __post_init__(self) -> None:
        self.directory = Path(self.directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def record_intent(self, intent: UploadIntent) -> None:
        """Persist an intent before the ledger write is attempted."""
        payload = {
            "identity": intent.identity,
            "backend": intent.backend,
            "remote_url": intent.remote_url,
            "created_at": intent.created_at.isoformat(),
        }
        self._path(intent.identity).write_text(json.dumps(payload), encoding="utf-8")

    def clear(self, identity: str) -> None:
        """Drop an intent once it is resolved."""
        self._path(identity).unlink(missing_ok=True)

    def list_intents(self) -> list[UploadIntent]:
        """Return every pending intent, skipping unreadable entries."""
        intents: list[UploadIntent] = []
        for path in sorted(self.directory.glob("*.json")):
            try:
                row = json.loads(path.read_text(encoding="utf-8"))
                intents.append(
                    UploadIntent(
                        identity=row["identity"],
                        backend=row["backend"],
                        remote_url=row["remote_url"],
                        created_at=datetime.fromisoformat(row["created_at"]),
                    )
                )
            except (OSError, ValueError, KeyError) as exc:
                _logger.warning("Skipping unreadable upload intent %s: %s", path, exc)
        return intents

    def _path(self, identity: str) -> Path:
        return self.directory / f"{identity}.json"
