"""Device identity persisted to a file on first use."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from uuid import uuid4

from macrocoach_photos.services.device_identity import DeviceIdentityProvider

_logger = logging.getLogger(__name__)


@dataclass
class FileDeviceIdentityProvider(DeviceIdentityProvider):
    """Generates a device id once per install and reuses it afterwards."""

    path: Path
    _device_id: str | None = field(default=None, init=False, repr=False)

    def get_device_id(self) -> str:
        """Return the persisted device id, creating it on first call."""
        if self._device_id is None:
            self._device_id = self._load_or_create()
        return self._device_id

    def _load_or_create(self) -> str:
        path = Path(self.path)
        if path.is_file():
            stored = path.read_text(encoding="utf-8").strip()
            if stored:
                return stored
        device_id = f"device_{uuid4().hex}"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(device_id, encoding="utf-8")
        _logger.info("Generated new device id %s", device_id)
        return device_id
