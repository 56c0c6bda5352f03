"""Lessons router — browse and delete saved lessons."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from linguagen.dependencies import get_library
from linguagen.exceptions import LessonNotFound
from linguagen.schemas.lesson import LessonListResponse
from linguagen.services.library import LessonLibrary

router = APIRouter(prefix="/api/lessons", tags=["lessons"])


@router.get("", response_model=LessonListResponse)
def list_lessons(
    student_id: Optional[str] = Query(None),
    library: LessonLibrary = Depends(get_library),
):
    lessons = library.lessons_for_student(student_id) if student_id else library.lessons
    return LessonListResponse(lessons=lessons, total=len(lessons))


@router.get("/{lesson_id}")
def get_lesson(lesson_id: str, library: LessonLibrary = Depends(get_library)):
    lesson = library.get_lesson(lesson_id)
    if lesson is None:
        raise LessonNotFound("Lesson not found.")
    return lesson


@router.delete("/{lesson_id}", status_code=204)
def delete_lesson(
    lesson_id: str,
    confirm: bool = Query(False),
    library: LessonLibrary = Depends(get_library),
):
    library.delete_lesson(lesson_id, confirmed=confirm)
