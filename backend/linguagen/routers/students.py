"""Students router — profile CRUD."""

from fastapi import APIRouter, Depends, Query

from linguagen.dependencies import get_student_manager
from linguagen.schemas.student import StudentListResponse, StudentProfileIn
from linguagen.services.students import StudentManager

router = APIRouter(prefix="/api/students", tags=["students"])


@router.get("", response_model=StudentListResponse)
def list_students(manager: StudentManager = Depends(get_student_manager)):
    students = manager.list_students()
    return StudentListResponse(students=students, total=len(students))


@router.post("", status_code=201)
def create_student(profile: StudentProfileIn, manager: StudentManager = Depends(get_student_manager)):
    return manager.create(profile)


@router.get("/{student_id}")
def get_student(student_id: str, manager: StudentManager = Depends(get_student_manager)):
    return manager.get(student_id)


@router.put("/{student_id}")
def update_student(
    student_id: str,
    profile: StudentProfileIn,
    manager: StudentManager = Depends(get_student_manager),
):
    """Save profile edits; saved lessons pick up the new name."""
    return manager.update(student_id, profile)


@router.delete("/{student_id}", status_code=204)
def delete_student(
    student_id: str,
    confirm: bool = Query(False),
    manager: StudentManager = Depends(get_student_manager),
):
    """Delete a profile.  Pass ?confirm=true; lessons are kept."""
    manager.delete(student_id, confirmed=confirm)
