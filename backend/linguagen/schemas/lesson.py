"""Lesson document schema — the structure the generator must return.

Field names and nesting match the persisted JSON exactly, so a validated model
dumps back to the same object graph the record store keeps.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


# ── Student book ─────────────────────────────────────────────────────────────

class BilingualItem(BaseModel):
    english: str
    portuguese: str


class GrammarSection(BaseModel):
    topics: list[str]
    examples: list[BilingualItem]


class CheckItOutBox(BaseModel):
    title: str
    content: list[str]


class CheckItOut(BaseModel):
    boxes: list[CheckItOutBox]


class StudentBookContent(BaseModel):
    verbs_header: list[BilingualItem]
    new_words: list[BilingualItem]
    useful_phrases: list[BilingualItem]
    grammar: GrammarSection
    real_life: list[BilingualItem]
    check_it_out: CheckItOut


# ── Teacher's guide ──────────────────────────────────────────────────────────

class HeaderInfo(BaseModel):
    learning_objectives: list[str]
    grammar_focus: list[str]


class AssessmentQuestion(BaseModel):
    question: str
    answer: str


class Assessment(BaseModel):
    duration_minutes: int
    questions: list[AssessmentQuestion]


class DrillSection(BaseModel):
    duration_minutes: int
    sentences: list[str]  # "Base sentence. / Tradução. / cue 1 / cue 2"


class Drills(BaseModel):
    verbs_drill: DrillSection
    new_words_drill: DrillSection
    useful_phrases_drill: DrillSection
    grammar_drill: DrillSection


class SkillsCheck(BaseModel):
    skills: list[str]


class Procedures(BaseModel):
    homework_instructions: list[str]
    skills_check: SkillsCheck


class TeachersGuideContent(BaseModel):
    header_info: HeaderInfo
    assessment: Assessment
    drills: Drills
    procedures: Procedures


# ── Whole document ───────────────────────────────────────────────────────────

class LessonMetadata(BaseModel):
    lesson_number: int
    lesson_title: str
    category: Optional[str] = Field(default=None, description="e.g., Input Lesson, Output Lesson")


class LessonDocument(BaseModel):
    lesson_metadata: LessonMetadata
    student_book_content: StudentBookContent
    teachers_guide_content: TeachersGuideContent


class RefineResponse(BaseModel):
    lesson: LessonDocument
    explanation: str = Field(description="A brief explanation of the changes made to the lesson based on the user's request.")


class ChatTurn(BaseModel):
    role: str  # "user" | "model"
    text: str


# ── Saved lessons ────────────────────────────────────────────────────────────

class LessonListResponse(BaseModel):
    lessons: list[Any]  # restored backups may hold entries that are not objects
    total: int
