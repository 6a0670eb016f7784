"""Error types raised by the photo storage engine."""


class PhotoStorageError(Exception):
    """Base class for photo storage errors."""


class CompressionFailure(PhotoStorageError):
    """The image could not be decoded or re-encoded."""


class LocalPersistFailure(PhotoStorageError):
    """The local cache could not store the image."""


class BackendUploadFailure(PhotoStorageError):
    """A single remote backend rejected or dropped an upload."""

    def __init__(self, backend: str, reason: str) -> None:
        super().__init__(f"{backend}: {reason}")
        self.backend = backend
        self.reason = reason


class PhotoUploadError(PhotoStorageError):
    """An upload call failed and no identity can be returned."""

    kind = "upload_failed"


class AllTiersFailure(PhotoUploadError):
    """Neither the local cache nor any remote backend stored the image."""

    kind = "all_tiers_failed"

    def __init__(self, failures: list[BackendUploadFailure]) -> None:
        reasons = "; ".join(str(failure) for failure in failures) or "no backends"
        super().__init__(f"All storage tiers failed ({reasons})")
        self.failures = failures


class DeviceIdentityFailure(PhotoUploadError):
    """The installation id needed to tag the photo could not be read."""

    kind = "device_identity_unavailable"


class LedgerWriteFailure(PhotoUploadError):
    """The photo was stored but its metadata could not be recorded."""

    kind = "ledger_write_failed"


class DeleteFailure(PhotoStorageError):
    """A best-effort delete of a stored copy did not succeed."""
