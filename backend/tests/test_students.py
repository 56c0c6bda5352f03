"""Tests for the student entity manager and its cascade into saved lessons."""

import threading
import time

import pytest
from pydantic import ValidationError

from linguagen.exceptions import ConfirmationRequired, StorageQuotaExceeded, StudentNotFound
from linguagen.schemas.student import StudentProfileIn, StudentSkills
from linguagen.services.library import LessonLibrary
from linguagen.services.record_store import RecordStore
from linguagen.services.students import StudentManager


def _profile(name="Ana", **skills):
    return StudentProfileIn(
        name=name,
        interests="Tech",
        likes="Music",
        dislikes="Sports",
        skills=StudentSkills(**skills),
    )


def _lesson(lesson_id, student, doc, topic="Travel"):
    return {
        "id": lesson_id,
        "topic": topic,
        "studentId": student["id"],
        "profileSnapshot": student["name"],
        "createdAt": "2024-01-01T10:00:00.000Z",
        "data": doc,
    }


class TestCreate:
    def test_create_assigns_id_and_timestamp(self, manager, store):
        student = manager.create(_profile(speaking=2))

        assert student["id"]
        assert student["createdAt"].endswith("Z")
        assert student["skills"] == {"speaking": 2, "listening": 3, "reading": 3, "writing": 3}
        assert store.load_students() == [student]

    def test_create_appends(self, manager):
        first = manager.create(_profile("Ana"))
        second = manager.create(_profile("Bruno"))
        assert [s["id"] for s in manager.list_students()] == [first["id"], second["id"]]

    def test_free_text_fields_may_be_empty(self, manager):
        student = manager.create(StudentProfileIn(name="Caio"))
        assert student["interests"] == student["likes"] == student["dislikes"] == ""

    def test_name_is_required(self):
        with pytest.raises(ValidationError):
            StudentProfileIn(name="")

    def test_skills_outside_one_to_five_are_rejected(self):
        with pytest.raises(ValidationError):
            StudentSkills(speaking=6)
        with pytest.raises(ValidationError):
            StudentSkills(writing=0)


class TestUpdate:
    """Profile edits and the profileSnapshot cascade."""

    def test_update_keeps_identity_and_created_at(self, manager):
        student = manager.create(_profile("Ana"))
        updated = manager.update(student["id"], _profile("Ana Maria", reading=5))

        assert updated["id"] == student["id"]
        assert updated["createdAt"] == student["createdAt"]
        assert updated["name"] == "Ana Maria"
        assert updated["skills"]["reading"] == 5

    def test_update_rewrites_snapshot_on_matching_lessons_only(self, manager, library, store, lesson_doc):
        ana = manager.create(_profile("Ana"))
        bruno = manager.create(_profile("Bruno"))
        library.add_lesson(_lesson("l1", ana, lesson_doc))
        library.add_lesson(_lesson("l2", bruno, lesson_doc))
        library.add_lesson(_lesson("l3", ana, lesson_doc, topic="Food"))

        manager.update(ana["id"], _profile("Ana Clara"))

        persisted = {l["id"]: l for l in store.load_lessons()}
        assert persisted["l1"]["profileSnapshot"] == "Ana Clara"
        assert persisted["l3"]["profileSnapshot"] == "Ana Clara"
        assert persisted["l2"]["profileSnapshot"] == "Bruno"
        # Nothing else on the lesson changes
        assert persisted["l1"]["data"] == lesson_doc
        assert persisted["l1"]["topic"] == "Travel"

    def test_update_does_not_mutate_previous_lesson_objects(self, manager, library, lesson_doc):
        ana = manager.create(_profile("Ana"))
        original = library.add_lesson(_lesson("l1", ana, lesson_doc))

        manager.update(ana["id"], _profile("Ana Clara"))

        assert original["profileSnapshot"] == "Ana"
        assert library.get_lesson("l1")["profileSnapshot"] == "Ana Clara"

    def test_update_unknown_student(self, manager):
        with pytest.raises(StudentNotFound):
            manager.update("missing", _profile())

    def test_quota_failure_keeps_in_memory_update(self, session_factory, lesson_doc):
        """A failed save is reported but the in-memory edit stays."""
        store = RecordStore(session_factory, quota_bytes=4096)
        library = LessonLibrary(store).load()
        manager = StudentManager(library)
        ana = manager.create(_profile("Ana"))

        with pytest.raises(StorageQuotaExceeded):
            manager.update(ana["id"], _profile("A" * 5000))

        assert library.get_student(ana["id"])["name"] == "A" * 5000
        assert store.load_students()[0]["name"] == "Ana"


class TestDelete:
    def test_delete_requires_confirmation(self, manager):
        ana = manager.create(_profile("Ana"))
        with pytest.raises(ConfirmationRequired):
            manager.delete(ana["id"])
        assert manager.get(ana["id"]) == ana

    def test_delete_keeps_lessons_and_their_snapshot(self, manager, library, store, lesson_doc):
        ana = manager.create(_profile("Ana"))
        library.add_lesson(_lesson("l1", ana, lesson_doc))
        library.add_lesson(_lesson("l2", ana, lesson_doc, topic="Food"))
        lessons_before = store.load_lessons()

        manager.delete(ana["id"], confirmed=True)

        assert store.load_students() == []
        lessons_after = store.load_lessons()
        assert lessons_after == lessons_before
        assert all(l["profileSnapshot"] == "Ana" for l in lessons_after)
        assert all(l["studentId"] == ana["id"] for l in lessons_after)
        assert library.get_student(ana["id"]) is None

    def test_delete_unknown_student(self, manager):
        with pytest.raises(StudentNotFound):
            manager.delete("missing", confirmed=True)


class TestConcurrentRequests:
    """Sync routes run on FastAPI's threadpool; no change may be lost."""

    def test_parallel_creates_all_persist(self, manager, store, monkeypatch):
        save_students = store.save_students

        def slow_save(students):
            time.sleep(0.01)
            save_students(students)

        monkeypatch.setattr(store, "save_students", slow_save)

        threads = [threading.Thread(target=manager.create, args=(_profile(f"S{i}"),)) for i in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(s["name"] for s in manager.list_students()) == [f"S{i}" for i in range(5)]
        assert len(store.load_students()) == 5

    def test_parallel_rename_and_create(self, manager, library, store, lesson_doc, monkeypatch):
        ana = manager.create(_profile("Ana"))
        library.add_lesson(_lesson("l1", ana, lesson_doc))
        save_students = store.save_students

        def slow_save(students):
            time.sleep(0.01)
            save_students(students)

        monkeypatch.setattr(store, "save_students", slow_save)

        threads = [
            threading.Thread(target=manager.update, args=(ana["id"], _profile("Ana Clara"))),
            threading.Thread(target=manager.create, args=(_profile("Bruno"),)),
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(s["name"] for s in store.load_students()) == ["Ana Clara", "Bruno"]
        assert store.load_lessons()[0]["profileSnapshot"] == "Ana Clara"


class TestMalformedRestoredRecords:
    """Backups are restored as-is; entries that are not objects never match a lookup."""

    def test_lookups_and_changes_skip_non_objects(self, manager, library, store):
        contents = store.import_data('{"students": ["oops"], "lessons": [42]}')
        library.restore(contents.students, contents.lessons, confirmed=True)

        with pytest.raises(StudentNotFound):
            manager.get("x")
        assert library.get_lesson("x") is None
        assert library.lessons_for_student("x") == []
        assert library.previous_topics("x") == []

        ana = manager.create(_profile("Ana"))
        renamed = manager.update(ana["id"], _profile("Ana Clara"))
        manager.delete(ana["id"], confirmed=True)

        assert renamed["name"] == "Ana Clara"
        assert store.load_students() == ["oops"]
        assert store.load_lessons() == [42]
