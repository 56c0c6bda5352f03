"""Tests for the in-memory lesson library."""

import pytest

from linguagen.exceptions import ConfirmationRequired, LessonNotFound
from linguagen.services.library import LessonLibrary


def _lesson(lesson_id, student_id="s1", topic="Travel", created_at="2024-01-01T00:00:00.000Z"):
    return {
        "id": lesson_id,
        "topic": topic,
        "studentId": student_id,
        "profileSnapshot": "Ana",
        "createdAt": created_at,
        "data": {},
    }


class TestPreviousTopics:
    """Context handed to the generator: newest first, at most nine."""

    def test_nine_most_recent_topics_newest_first(self, library):
        # Insert out of order so sorting is by createdAt, not position
        for day in [5, 1, 12, 3, 9, 7, 11, 2, 10, 4, 8, 6]:
            library.add_lesson(_lesson(f"l{day}", topic=f"Topic {day}", created_at=f"2024-03-{day:02d}T09:00:00.000Z"))

        topics = library.previous_topics("s1")

        assert topics == [f"Topic {day}" for day in range(12, 3, -1)]

    def test_only_the_selected_student(self, library):
        library.add_lesson(_lesson("l1", student_id="s1", topic="Travel"))
        library.add_lesson(_lesson("l2", student_id="s2", topic="Food"))
        assert library.previous_topics("s1") == ["Travel"]

    def test_no_lessons_gives_empty_history(self, library):
        assert library.previous_topics("s1") == []

    def test_custom_limit(self, library):
        for day in range(1, 5):
            library.add_lesson(_lesson(f"l{day}", topic=f"T{day}", created_at=f"2024-03-0{day}T00:00:00Z"))
        assert library.previous_topics("s1", limit=2) == ["T4", "T3"]

    def test_unparseable_timestamps_sort_last(self, library):
        library.add_lesson(_lesson("l1", topic="Broken", created_at="yesterday"))
        library.add_lesson(_lesson("l2", topic="Good", created_at="2024-01-01T00:00:00.000Z"))
        assert library.previous_topics("s1") == ["Good", "Broken"]


class TestLessons:
    def test_add_and_reload(self, library, store):
        library.add_lesson(_lesson("l1"))
        assert store.load_lessons() == [_lesson("l1")]

    def test_update_replaces_in_place(self, library, store):
        library.add_lesson(_lesson("l1", topic="Travel"))
        library.add_lesson(_lesson("l2", topic="Food"))

        library.update_lesson({**_lesson("l1"), "topic": "Trips"})

        assert [l["topic"] for l in store.load_lessons()] == ["Trips", "Food"]

    def test_update_unknown_lesson(self, library):
        with pytest.raises(LessonNotFound):
            library.update_lesson(_lesson("missing"))

    def test_delete_requires_confirmation(self, library):
        library.add_lesson(_lesson("l1"))
        with pytest.raises(ConfirmationRequired):
            library.delete_lesson("l1")
        library.delete_lesson("l1", confirmed=True)
        assert library.lessons == []


class TestWholeDataset:
    def test_restore_overwrites_everything(self, library, store):
        library.set_students([{"id": "old", "name": "Old"}])
        library.add_lesson(_lesson("old-lesson"))

        library.restore([{"id": "s9", "name": "New"}], [_lesson("l9", student_id="s9")], confirmed=True)

        assert store.load_students() == [{"id": "s9", "name": "New"}]
        assert [l["id"] for l in store.load_lessons()] == ["l9"]

    def test_restore_requires_confirmation(self, library):
        library.set_students([{"id": "old"}])
        with pytest.raises(ConfirmationRequired) as exc:
            library.restore([{"id": "a"}, {"id": "b"}], [], confirmed=False)
        assert "Found 2 students and 0 lessons" in exc.value.message
        assert library.students == [{"id": "old"}]

    def test_clear(self, library, store):
        library.set_students([{"id": "s1"}])
        library.add_lesson(_lesson("l1"))

        with pytest.raises(ConfirmationRequired):
            library.clear()
        library.clear(confirmed=True)

        assert library.students == [] and library.lessons == []
        assert store.load_students() == [] and store.load_lessons() == []

    def test_load_reads_persisted_state(self, store, library):
        library.set_students([{"id": "s1"}])
        library.add_lesson(_lesson("l1"))

        fresh = LessonLibrary(store).load()
        assert fresh.students == [{"id": "s1"}]
        assert [l["id"] for l in fresh.lessons] == ["l1"]
