"""Record store — whole-collection persistence for students and lessons.

Each collection is serialized as one JSON array and written to a named slot,
replacing whatever was there.  Backups are the same arrays wrapped in a small
versioned envelope.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from linguagen.config import settings
from linguagen.exceptions import InvalidBackupFormat, ParseError, StorageQuotaExceeded
from linguagen.models.storage_slot import StorageSlot

logger = logging.getLogger(__name__)

STUDENTS_KEY = "linguagen_students"
LESSONS_KEY = "linguagen_lessons"
API_KEY_KEY = "linguagen_api_key"

BACKUP_VERSION = 1


def utc_now_iso() -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class BackupFile:
    filename: str
    content: str
    media_type: str = "application/json"


@dataclass
class BackupContents:
    students: list
    lessons: list


class RecordStore:
    """Named-slot store on top of a SQLAlchemy session factory."""

    def __init__(self, session_factory: sessionmaker, quota_bytes: int | None = None):
        self._session_factory = session_factory
        self.quota_bytes = settings.STORAGE_QUOTA_BYTES if quota_bytes is None else quota_bytes

    # ── Raw slots ────────────────────────────────────────────────────────────

    def _read(self, key: str) -> str | None:
        db: Session = self._session_factory()
        try:
            slot = db.get(StorageSlot, key)
            return slot.value if slot else None
        finally:
            db.close()

    def _write(self, key: str, value: str, quota_message: str) -> None:
        encoded = value.encode("utf-8")
        if self.quota_bytes and len(encoded) > self.quota_bytes:
            logger.warning("Refusing to write %s: %d bytes over quota", key, len(encoded))
            raise StorageQuotaExceeded(quota_message)

        # One-statement upsert: the row may appear between a read and an insert
        stmt = sqlite_insert(StorageSlot).values(key=key, value=value, updated_at=datetime.now(timezone.utc))
        stmt = stmt.on_conflict_do_update(
            index_elements=[StorageSlot.key],
            set_={"value": stmt.excluded.value, "updated_at": stmt.excluded.updated_at},
        )

        db: Session = self._session_factory()
        try:
            db.execute(stmt)
            db.commit()
        except OperationalError as e:
            db.rollback()
            logger.warning("Failed to save %s: %s", key, e)
            raise StorageQuotaExceeded(quota_message) from e
        finally:
            db.close()

    def _remove(self, *keys: str) -> None:
        db: Session = self._session_factory()
        try:
            db.query(StorageSlot).filter(StorageSlot.key.in_(keys)).delete(synchronize_session=False)
            db.commit()
        finally:
            db.close()

    def _load_collection(self, key: str, label: str) -> list:
        raw = self._read(key)
        if raw is None:
            return []
        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ParseError(f"{label} slot does not hold an array")
            return data
        except (json.JSONDecodeError, ParseError) as e:
            # Corrupt state is dropped so startup never blocks on it
            logger.error("Failed to load %s: %s", label, e)
            return []

    # ── Collections ──────────────────────────────────────────────────────────

    def load_students(self) -> list:
        return self._load_collection(STUDENTS_KEY, "students")

    def load_lessons(self) -> list:
        return self._load_collection(LESSONS_KEY, "lessons")

    def save_students(self, students: list) -> None:
        self._write(STUDENTS_KEY, json.dumps(students), "Storage quota exceeded.")

    def save_lessons(self, lessons: list) -> None:
        self._write(LESSONS_KEY, json.dumps(lessons), "Storage quota exceeded. Please delete old lessons.")

    def clear_all_data(self) -> None:
        self._remove(LESSONS_KEY, STUDENTS_KEY)
        logger.info("Cleared all students and lessons")

    # ── Generator credential ─────────────────────────────────────────────────

    def load_api_key(self) -> str:
        return self._read(API_KEY_KEY) or ""

    def save_api_key(self, api_key: str) -> None:
        self._write(API_KEY_KEY, api_key.strip(), "Storage quota exceeded.")

    def clear_api_key(self) -> None:
        self._remove(API_KEY_KEY)

    # ── Backup ───────────────────────────────────────────────────────────────

    def export_data(self, lessons: list, students: list) -> BackupFile:
        """Wrap both collections in a versioned, pretty-printed JSON document."""
        timestamp = utc_now_iso()
        data = {
            "version": BACKUP_VERSION,
            "timestamp": timestamp,
            "students": students,
            "lessons": lessons,
        }
        return BackupFile(
            filename=f"{settings.BACKUP_FILENAME_PREFIX}-{timestamp.split('T')[0]}.json",
            content=json.dumps(data, indent=2, ensure_ascii=False),
        )

    def import_data(self, raw: bytes | str) -> BackupContents:
        """Parse a backup file.

        Only the envelope is checked: ``students`` and ``lessons`` must both be
        arrays.  Individual records pass through untouched.
        """
        try:
            text = raw.decode("utf-8") if isinstance(raw, bytes) else raw
            data = json.loads(text)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise InvalidBackupFormat("Invalid backup file format.") from e

        if not isinstance(data, dict):
            raise InvalidBackupFormat("Invalid backup file format.")
        if not isinstance(data.get("students"), list) or not isinstance(data.get("lessons"), list):
            raise InvalidBackupFormat("Invalid backup file format.")

        return BackupContents(students=data["students"], lessons=data["lessons"])
