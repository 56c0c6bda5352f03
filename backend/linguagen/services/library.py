"""In-memory library of students and saved lessons, written through to the record store.

Collections are lists of plain JSON object graphs.  Every change builds a new
list and assigns it, then saves the whole collection.  A failed save is not
rolled back: the caller sees StorageQuotaExceeded and memory stays ahead of
what was persisted until the next successful save.

Sync routes run in FastAPI's threadpool, so every read-modify-write happens
under ``lock``.  Callers that combine several steps (StudentManager) take the
same lock around the whole change.
"""

import logging
import threading
from datetime import datetime, timezone

from linguagen.config import settings
from linguagen.exceptions import ConfirmationRequired, LessonNotFound
from linguagen.services.record_store import RecordStore

logger = logging.getLogger(__name__)


def has_field(record, field: str, value) -> bool:
    """True when ``record`` is an object whose ``field`` equals ``value``.

    Restored backups may hold entries that are not objects at all; those
    never match.
    """
    return isinstance(record, dict) and record.get(field) == value


def _created_at_key(record: dict) -> float:
    """Sort key for createdAt; unparseable stamps sort as the oldest."""
    raw = record.get("createdAt") or ""
    try:
        stamp = datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
    except ValueError:
        return float("-inf")
    if stamp.tzinfo is None:
        stamp = stamp.replace(tzinfo=timezone.utc)
    return stamp.timestamp()


class LessonLibrary:
    def __init__(self, store: RecordStore):
        self.store = store
        self.students: list[dict] = []
        self.lessons: list[dict] = []
        self.lock = threading.RLock()

    def load(self) -> "LessonLibrary":
        with self.lock:
            self.students = self.store.load_students()
            self.lessons = self.store.load_lessons()
        logger.info("Loaded %d students and %d lessons", len(self.students), len(self.lessons))
        return self

    # ── Students ─────────────────────────────────────────────────────────────

    def get_student(self, student_id: str) -> dict | None:
        return next((s for s in self.students if has_field(s, "id", student_id)), None)

    def set_students(self, students: list[dict]) -> None:
        with self.lock:
            self.students = students
            self.store.save_students(self.students)

    def set_collections(self, students: list[dict], lessons: list[dict]) -> None:
        """Swap both collections in one step, then persist both."""
        with self.lock:
            self.students = students
            self.lessons = lessons
            self.store.save_students(self.students)
            self.store.save_lessons(self.lessons)

    # ── Lessons ──────────────────────────────────────────────────────────────

    def get_lesson(self, lesson_id: str) -> dict | None:
        return next((l for l in self.lessons if has_field(l, "id", lesson_id)), None)

    def lessons_for_student(self, student_id: str) -> list[dict]:
        return [l for l in self.lessons if has_field(l, "studentId", student_id)]

    def add_lesson(self, record: dict) -> dict:
        with self.lock:
            self.lessons = [*self.lessons, record]
            self.store.save_lessons(self.lessons)
        return record

    def update_lesson(self, record: dict) -> dict:
        with self.lock:
            if self.get_lesson(record["id"]) is None:
                raise LessonNotFound("Lesson not found.")
            self.lessons = [record if has_field(l, "id", record["id"]) else l for l in self.lessons]
            self.store.save_lessons(self.lessons)
        return record

    def delete_lesson(self, lesson_id: str, confirmed: bool = False) -> None:
        with self.lock:
            if self.get_lesson(lesson_id) is None:
                raise LessonNotFound("Lesson not found.")
            if not confirmed:
                raise ConfirmationRequired("Are you sure you want to delete this lesson?")
            self.lessons = [l for l in self.lessons if not has_field(l, "id", lesson_id)]
            self.store.save_lessons(self.lessons)

    def previous_topics(self, student_id: str, limit: int | None = None) -> list[str]:
        """Topics of the student's most recent lessons, newest first."""
        limit = settings.PREVIOUS_TOPICS_LIMIT if limit is None else limit
        ordered = sorted(self.lessons_for_student(student_id), key=_created_at_key, reverse=True)
        return [l.get("topic", "") for l in ordered[:limit]]

    # ── Whole dataset ────────────────────────────────────────────────────────

    def restore(self, students: list, lessons: list, confirmed: bool = False) -> None:
        """Overwrite both collections with a backup's contents."""
        if not confirmed:
            raise ConfirmationRequired(
                f"Found {len(students)} students and {len(lessons)} lessons in backup. "
                "This will OVERWRITE your current data. Continue?"
            )
        self.set_collections(list(students), list(lessons))
        logger.info("Restored %d students and %d lessons from backup", len(students), len(lessons))

    def clear(self, confirmed: bool = False) -> None:
        if not confirmed:
            raise ConfirmationRequired(
                "DANGER: This will permanently delete ALL students and lessons. "
                "This cannot be undone. Are you sure?"
            )
        with self.lock:
            self.store.clear_all_data()
            self.students = []
            self.lessons = []
