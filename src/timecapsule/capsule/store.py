"""File-backed storage for sealed capsules: one JSON file per record."""

import logging
from pathlib import Path

from ..config import Settings
from ..utils import get_unique_path
from .errors import CapsuleNotFoundError, MalformedRecordError, StorageError
from .schema import CapsuleSummary, SealedRecord

logger = logging.getLogger(__name__)

RECORD_SUFFIX = ".json"


class CapsuleStore:
    """Saves, loads, lists and deletes capsule records in the storage directory."""

    def __init__(self, settings: Settings):
        self.settings = settings

    @property
    def root(self) -> Path:
        return self.settings.storage_dir

    def path_for(self, record_id: str) -> Path:
        """Resolve the storage path for a record id.

        Security:
            - Rejects ids containing path separators or '..'
        """
        if not record_id or "/" in record_id or "\\" in record_id or ".." in record_id:
            raise CapsuleNotFoundError(f"Invalid capsule id: {record_id!r}")
        return self.root / f"{record_id}{RECORD_SUFFIX}"

    def save(self, record: SealedRecord, path: Path | None = None) -> Path:
        """Write a record to disk.

        Without ``path`` the record lands in the storage directory as
        ``<id>.json``. An explicit path never overwrites an existing file.

        Returns the path that was written.

        Raises:
            StorageError: If the directory or file cannot be written.
        """
        target_dir = self.root if path is None else path.parent
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            dest = self.path_for(record.id) if path is None else get_unique_path(path)
            dest.write_text(record.to_json(), encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to save capsule: {e}") from e
        logger.debug(f"[STORE] Saved capsule {record.id} to {dest}")
        return dest

    def load(self, ref: str | Path) -> SealedRecord:
        """Load a record by id (a ``str``) or by file path (a ``Path``).

        Ids always resolve inside the storage directory.

        Raises:
            CapsuleNotFoundError: If nothing exists at the id or path.
            MalformedRecordError: If the file is not a valid record.
        """
        path = ref if isinstance(ref, Path) else self.path_for(ref)
        return self.load_file(path)

    def load_file(self, path: Path) -> SealedRecord:
        try:
            data = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise CapsuleNotFoundError(f"No capsule at {path}") from None
        except (OSError, UnicodeDecodeError) as e:
            raise MalformedRecordError(f"Failed to read {path}: {e}") from e
        return SealedRecord.from_json(data)

    def list(self) -> list[CapsuleSummary]:
        """Summaries of every readable record, soonest unlock first."""
        summaries: list[CapsuleSummary] = []
        if not self.root.exists():
            return summaries

        for path in self.root.glob(f"*{RECORD_SUFFIX}"):
            try:
                record = self.load_file(path)
            except MalformedRecordError as e:
                logger.warning(f"[STORE] Skipping {path.name}: {e}")
                continue
            summaries.append(CapsuleSummary.from_record(record, path))

        return sorted(summaries, key=lambda s: s.unlock_at)

    def delete(self, record_id: str) -> Path:
        """Remove a stored record and return the deleted path."""
        path = self.path_for(record_id)
        try:
            path.unlink()
        except FileNotFoundError:
            raise CapsuleNotFoundError(f"No capsule with id {record_id}") from None
        except OSError as e:
            raise StorageError(f"Failed to delete capsule {record_id}: {e}") from e
        logger.info(f"[STORE] Deleted capsule {record_id}")
        return path
