"""Student profile request/response schemas."""

from typing import Any

from pydantic import BaseModel, Field


class StudentSkills(BaseModel):
    """Star ratings, 1 (beginner) to 5 (fluent), one per skill."""

    speaking: int = Field(default=3, ge=1, le=5)
    listening: int = Field(default=3, ge=1, le=5)
    reading: int = Field(default=3, ge=1, le=5)
    writing: int = Field(default=3, ge=1, le=5)


class StudentProfileIn(BaseModel):
    name: str = Field(..., min_length=1)
    interests: str = ""
    likes: str = ""
    dislikes: str = ""
    skills: StudentSkills = Field(default_factory=StudentSkills)


class StudentListResponse(BaseModel):
    students: list[Any]
    total: int
