"""Capsule sealing and opening.

Keys are derived from the password with Argon2id and content is encrypted
with AES-256-GCM. The record format version, id and unlock time are bound
as associated data, so editing any of them invalidates the ciphertext.

The unlock check is an access-control convenience, not a cryptographic delay
function; a holder of the file and password can always decrypt early by
bypassing the check in a modified client.
"""

import secrets
from datetime import datetime

from argon2.exceptions import HashingError
from argon2.low_level import Type, hash_secret_raw
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..utils import ensure_utc, utcnow
from .errors import DecryptionError, EncryptionError, MalformedRecordError, TimeLockedError
from .schema import FORMAT_VERSION, NONCE_LENGTH, SALT_LENGTH, KdfParams, SealedRecord, new_record_id

KEY_LENGTH = 32  # AES-256


def _to_bytes(value: bytes | str) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


def derive_key(password: bytes, salt: bytes, params: KdfParams) -> bytes:
    """Derive a 256-bit key from a password using Argon2id."""
    return hash_secret_raw(
        secret=password,
        salt=salt,
        time_cost=params.time_cost,
        memory_cost=params.memory_cost,
        parallelism=params.parallelism,
        hash_len=KEY_LENGTH,
        type=Type.ID,
    )


def associated_data(version: int, record_id: str, unlock_at: datetime) -> bytes:
    """Metadata authenticated alongside the ciphertext."""
    stamp = ensure_utc(unlock_at).isoformat()
    return f"timecapsule/v{version}|{record_id}|{stamp}".encode("utf-8")


class CapsuleCodec:
    """Turns plaintext into sealed records and back.

    The codec has no side effects beyond consuming randomness. It never logs
    and never retries; every failure surfaces as a CapsuleError subclass.
    """

    def __init__(self, kdf: KdfParams | None = None):
        self.kdf = kdf or KdfParams()

    def seal(
        self,
        plaintext: bytes | str,
        password: bytes | str,
        unlock_at: datetime,
        label: str | None = None,
        now: datetime | None = None,
    ) -> SealedRecord:
        """Encrypt plaintext into a record that opens at ``unlock_at``.

        Raises:
            EncryptionError: If key derivation or encryption fails.
        """
        salt = secrets.token_bytes(SALT_LENGTH)
        nonce = secrets.token_bytes(NONCE_LENGTH)
        record_id = new_record_id()
        unlock_at = ensure_utc(unlock_at)
        created_at = ensure_utc(now) if now is not None else utcnow()

        try:
            key = derive_key(_to_bytes(password), salt, self.kdf)
            ciphertext = AESGCM(key).encrypt(
                nonce,
                _to_bytes(plaintext),
                associated_data(FORMAT_VERSION, record_id, unlock_at),
            )
        except (HashingError, OverflowError, ValueError) as e:
            raise EncryptionError(f"Encryption failed: {e}") from e

        return SealedRecord(
            version=FORMAT_VERSION,
            id=record_id,
            label=label,
            unlock_at=unlock_at,
            created_at=created_at,
            kdf=self.kdf,
            salt=salt,
            nonce=nonce,
            ciphertext=ciphertext,
        )

    def open(
        self,
        record: SealedRecord,
        password: bytes | str,
        now: datetime | None = None,
    ) -> bytes:
        """Decrypt a record whose unlock time has passed.

        The time check happens before any key derivation, so an early attempt
        learns nothing about the password.

        Raises:
            TimeLockedError: If ``now`` is before the record's unlock time.
            DecryptionError: On a wrong password or tampered record.
            MalformedRecordError: If the stored KDF parameters are unusable.
        """
        now = ensure_utc(now) if now is not None else utcnow()
        if now < record.unlock_at:
            raise TimeLockedError(record.unlock_at, record.unlock_at - now)

        try:
            key = derive_key(_to_bytes(password), record.salt, record.kdf)
        except HashingError as e:
            raise MalformedRecordError(f"Key derivation failed: {e}") from e

        try:
            return AESGCM(key).decrypt(
                record.nonce,
                record.ciphertext,
                associated_data(record.version, record.id, record.unlock_at),
            )
        except InvalidTag:
            raise DecryptionError("Invalid password or corrupted data") from None
