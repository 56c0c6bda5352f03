"""Lesson workflow request schemas."""

from typing import Any, Optional, Union

from pydantic import BaseModel

PathSpec = Union[str, list[Union[str, int]]]


class WorkflowCreate(BaseModel):
    student_id: str = ""
    topic: str = ""
    lesson_id: Optional[str] = None  # set to open a saved lesson for editing


class WorkflowInputUpdate(BaseModel):
    topic: Optional[str] = None
    student_id: Optional[str] = None


class FieldEdit(BaseModel):
    path: PathSpec
    value: Any


class ItemEdit(BaseModel):
    path: PathSpec
    index: int
    item: Any = None


class RefineRequest(BaseModel):
    instruction: str
