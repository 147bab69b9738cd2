"""Capsule schema, codec, and errors."""

from .codec import CapsuleCodec, derive_key
from .errors import (
    CapsuleError,
    CapsuleNotFoundError,
    DecryptionError,
    EncryptionError,
    MalformedRecordError,
    StorageError,
    TimeLockedError,
)
from .schema import CapsuleSummary, KdfParams, SealedRecord

__all__ = [
    "CapsuleCodec",
    "CapsuleError",
    "CapsuleNotFoundError",
    "CapsuleSummary",
    "DecryptionError",
    "EncryptionError",
    "KdfParams",
    "MalformedRecordError",
    "SealedRecord",
    "StorageError",
    "TimeLockedError",
    "derive_key",
]
