"""Device identity interface used for local-copy affinity."""

from typing import Protocol


class DeviceIdentityProvider(Protocol):
    """Supplies an identifier that is stable for the lifetime of an install."""

    def get_device_id(self) -> str:
        """Return this install's device id."""
