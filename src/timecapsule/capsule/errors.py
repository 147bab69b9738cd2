"""Exceptions raised while sealing, opening and storing capsules."""

from datetime import datetime, timedelta


class CapsuleError(Exception):
    """Base class for all capsule failures."""


class TimeLockedError(CapsuleError):
    """The capsule's unlock time has not been reached yet."""

    def __init__(self, unlock_at: datetime, remaining: timedelta):
        self.unlock_at = unlock_at
        self.remaining = remaining
        super().__init__(f"Capsule is still time-locked until {unlock_at.isoformat()}")


class DecryptionError(CapsuleError):
    """Authentication failed: wrong password or corrupted data."""


class EncryptionError(CapsuleError):
    """The cipher or key derivation library failed while sealing."""


class MalformedRecordError(CapsuleError):
    """A stored record could not be parsed or has invalid fields."""


class CapsuleNotFoundError(CapsuleError):
    """No stored record matches the requested id or path."""


class StorageError(CapsuleError):
    """A record could not be written to or removed from disk."""
