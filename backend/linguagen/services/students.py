"""Student entity manager — profile CRUD and the name cascade into saved lessons."""

import logging
import uuid

from linguagen.exceptions import ConfirmationRequired, StudentNotFound
from linguagen.schemas.student import StudentProfileIn
from linguagen.services.library import LessonLibrary, has_field
from linguagen.services.record_store import utc_now_iso

logger = logging.getLogger(__name__)


def _profile_fields(profile: StudentProfileIn) -> dict:
    return {
        "name": profile.name,
        "interests": profile.interests,
        "likes": profile.likes,
        "dislikes": profile.dislikes,
        "skills": profile.skills.model_dump(),
    }


class StudentManager:
    def __init__(self, library: LessonLibrary):
        self.library = library

    def list_students(self) -> list[dict]:
        return self.library.students

    def get(self, student_id: str) -> dict:
        student = self.library.get_student(student_id)
        if student is None:
            raise StudentNotFound("Student not found.")
        return student

    def create(self, profile: StudentProfileIn) -> dict:
        student = {
            "id": str(uuid.uuid4()),
            **_profile_fields(profile),
            "createdAt": utc_now_iso(),
        }
        with self.library.lock:
            self.library.set_students([*self.library.students, student])
        logger.info("Created student %s", student["id"])
        return student

    def update(self, student_id: str, profile: StudentProfileIn) -> dict:
        """Replace a profile and re-sync the name snapshot on its lessons.

        Both collections are swapped together before either is saved, so a
        single edit never leaves one of them behind in memory.
        """
        with self.library.lock:
            existing = self.get(student_id)
            updated = {
                "id": existing["id"],
                **_profile_fields(profile),
                "createdAt": existing.get("createdAt") or utc_now_iso(),
            }
            students = [updated if has_field(s, "id", student_id) else s for s in self.library.students]
            lessons = [
                {**l, "profileSnapshot": updated["name"]} if has_field(l, "studentId", student_id) else l
                for l in self.library.lessons
            ]
            self.library.set_collections(students, lessons)
        return updated

    def delete(self, student_id: str, confirmed: bool = False) -> None:
        """Remove a profile.  Its lessons keep their studentId and last-known name."""
        with self.library.lock:
            self.get(student_id)
            if not confirmed:
                raise ConfirmationRequired(
                    "Are you sure you want to delete this student? "
                    "Associated lessons will maintain their history but be unlinked."
                )
            self.library.set_students(
                [s for s in self.library.students if not has_field(s, "id", student_id)]
            )
        logger.info("Deleted student %s", student_id)
