"""Lesson workflow — the two-step create/edit flow around a draft lesson document.

    input ──generate()──> review ──approve()──> closed
      ^                     │
      └──────cancel()───────┘   (new lessons; edits close instead)

In review the draft can be edited field by field or refined by instruction.
Every change swaps in a new draft object; the old one is never touched.

Only one generator call may be in flight per workflow.  Each call remembers
the epoch it started in, and cancel()/approve() move the epoch on, so a reply
that lands after the user walked away is dropped instead of resurrecting an
abandoned draft.
"""

import copy
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Optional

from linguagen.config import settings
from linguagen.exceptions import (
    GenerationError,
    LessonNotFound,
    RefinementError,
    WorkflowBusy,
    WorkflowClosed,
    WorkflowValidationError,
)
from linguagen.schemas.lesson import ChatTurn
from linguagen.services import lesson_document
from linguagen.services.generator import LessonGenerator, needs_api_key
from linguagen.services.library import LessonLibrary
from linguagen.services.record_store import utc_now_iso

logger = logging.getLogger(__name__)

INPUT = "input"
REVIEW = "review"
CLOSED = "closed"


@dataclass
class WorkflowError:
    message: str
    needs_api_key: bool = False


@dataclass
class LessonWorkflow:
    library: LessonLibrary
    generator: LessonGenerator
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    step: str = INPUT
    topic: str = ""
    student_id: str = ""
    draft: Optional[dict] = None
    editing_lesson_id: Optional[str] = None
    error: Optional[WorkflowError] = None
    history: list[ChatTurn] = field(default_factory=list)
    loading: bool = False
    saved_lesson_id: Optional[str] = None
    _epoch: int = 0

    # ── Construction ─────────────────────────────────────────────────────────

    @classmethod
    def new(cls, library: LessonLibrary, generator: LessonGenerator, student_id: str = "") -> "LessonWorkflow":
        return cls(library=library, generator=generator, student_id=student_id)

    @classmethod
    def for_lesson(cls, library: LessonLibrary, generator: LessonGenerator, lesson_id: str) -> "LessonWorkflow":
        """Open a saved lesson for editing, straight into review."""
        saved = library.get_lesson(lesson_id)
        if saved is None:
            raise LessonNotFound("Lesson not found.")
        return cls(
            library=library,
            generator=generator,
            step=REVIEW,
            topic=saved.get("topic", ""),
            student_id=saved.get("studentId", ""),
            draft=copy.deepcopy(saved.get("data")),
            editing_lesson_id=lesson_id,
        )

    @property
    def is_edit(self) -> bool:
        return self.editing_lesson_id is not None

    # ── Guards ───────────────────────────────────────────────────────────────

    def _require_open(self) -> None:
        if self.step == CLOSED:
            raise WorkflowClosed("This lesson workflow has already finished.")

    def _require_review(self) -> dict:
        self._require_open()
        if self.step != REVIEW or self.draft is None:
            raise WorkflowValidationError("There is no draft lesson to work on yet.")
        return self.draft

    def _require_idle(self) -> None:
        if self.loading:
            raise WorkflowBusy("Please wait for the current request to finish.")

    # ── Input step ───────────────────────────────────────────────────────────

    def set_topic(self, topic: str) -> None:
        self._require_open()
        self.topic = topic

    def select_student(self, student_id: str) -> None:
        self._require_open()
        if self.step != INPUT:
            raise WorkflowValidationError("The student can only be changed before generating.")
        self.student_id = student_id

    async def generate(self) -> Optional[dict]:
        """Ask the generator for a fresh draft and move to review.

        Returns the new draft, or None when the reply arrived after the
        workflow had been cancelled.
        """
        self._require_open()
        self._require_idle()
        if self.step != INPUT:
            raise WorkflowValidationError("A draft is already under review.")
        self.error = None

        if not self.topic.strip():
            self.error = WorkflowError("Please enter a topic.")
            raise WorkflowValidationError(self.error.message)
        student = self.library.get_student(self.student_id)
        if student is None:
            self.error = WorkflowError("Please select a valid student.")
            raise WorkflowValidationError(self.error.message)

        previous_topics = self.library.previous_topics(student["id"])
        epoch = self._epoch
        self.loading = True
        try:
            draft = await self.generator.generate_lesson(self.topic, student, previous_topics)
        except GenerationError as e:
            if epoch != self._epoch:
                return None
            self.error = WorkflowError(e.message, needs_api_key(e.message))
            raise
        finally:
            if epoch == self._epoch:
                self.loading = False

        if epoch != self._epoch:
            logger.info("Dropping lesson generated for abandoned workflow %s", self.id)
            return None

        self.draft = draft
        self.history = []
        self.step = REVIEW
        return self.draft

    # ── Review step ──────────────────────────────────────────────────────────

    def edit_field(self, path: lesson_document.Path, value: Any) -> dict:
        self._require_idle()
        self.draft = lesson_document.set_field(self._require_review(), path, value)
        return self.draft

    def replace_item(self, path: lesson_document.Path, index: int, item: Any) -> dict:
        self._require_idle()
        self.draft = lesson_document.replace_item(self._require_review(), path, index, item)
        return self.draft

    def insert_item(self, path: lesson_document.Path, index: int, item: Any) -> dict:
        self._require_idle()
        self.draft = lesson_document.insert_item(self._require_review(), path, index, item)
        return self.draft

    def remove_item(self, path: lesson_document.Path, index: int) -> dict:
        self._require_idle()
        self.draft = lesson_document.remove_item(self._require_review(), path, index)
        return self.draft

    async def refine(self, instruction: str) -> Optional[str]:
        """Replace the draft with the generator's revision of it.

        Returns the generator's explanation of what changed.  A blank
        instruction does nothing.  On failure the current draft stays exactly
        as it was.
        """
        current = self._require_review()
        self._require_idle()
        if not instruction.strip():
            return None
        self.error = None

        epoch = self._epoch
        self.loading = True
        try:
            result = await self.generator.refine_lesson(current, instruction, list(self.history))
        except RefinementError as e:
            if epoch != self._epoch:
                return None
            self.error = WorkflowError(e.message, needs_api_key(e.message))
            raise
        finally:
            if epoch == self._epoch:
                self.loading = False

        if epoch != self._epoch:
            logger.info("Dropping refinement for abandoned workflow %s", self.id)
            return None

        self.draft = result.lesson
        self.history = [
            *self.history,
            ChatTurn(role="user", text=instruction),
            ChatTurn(role="model", text=result.explanation),
        ]
        return result.explanation

    # ── Terminal actions ─────────────────────────────────────────────────────

    def approve(self) -> dict:
        """Commit the draft as a saved lesson and close the workflow."""
        draft = self._require_review()
        self._require_idle()

        if self.is_edit:
            existing = self.library.get_lesson(self.editing_lesson_id)
            if existing is None:
                raise LessonNotFound("Lesson not found.")
            record = {**existing, "topic": self.topic, "data": draft}
            self._close()
            self.library.update_lesson(record)
        else:
            student = self.library.get_student(self.student_id)
            record = {
                "id": str(uuid.uuid4()),
                "topic": self.topic,
                "studentId": self.student_id,
                "profileSnapshot": student.get("name", "Unknown") if student else "Unknown",
                "createdAt": utc_now_iso(),
                "data": draft,
            }
            self._close()
            self.library.add_lesson(record)

        self.saved_lesson_id = record["id"]
        logger.info("Saved lesson %s (%s)", record["id"], "updated" if self.is_edit else "new")
        return record

    def cancel(self) -> None:
        """Throw the draft away.

        New lessons go back to the input step; an edit closes and leaves the
        saved record as it was.
        """
        self._require_open()
        self._epoch += 1
        self.loading = False
        self.error = None
        if self.is_edit:
            self.step = CLOSED
            return
        self.step = INPUT
        self.draft = None
        self.history = []

    def _close(self) -> None:
        self._epoch += 1
        self.step = CLOSED

    # ── Views ────────────────────────────────────────────────────────────────

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "step": self.step,
            "topic": self.topic,
            "student_id": self.student_id,
            "editing_lesson_id": self.editing_lesson_id,
            "draft": self.draft,
            "loading": self.loading,
            "error": (
                {"message": self.error.message, "needs_api_key": self.error.needs_api_key}
                if self.error else None
            ),
            "history": [turn.model_dump() for turn in self.history],
            "saved_lesson_id": self.saved_lesson_id,
        }


class WorkflowRegistry:
    """Open workflows keyed by id, for the HTTP layer.

    Workflows the client walks away from are evicted once they have been
    idle for ``idle_seconds``; one with a generator call in flight is kept.
    """

    def __init__(self, idle_seconds: Optional[float] = None):
        self._workflows: dict[str, LessonWorkflow] = {}
        self._touched: dict[str, float] = {}
        self.idle_seconds = settings.WORKFLOW_IDLE_SECONDS if idle_seconds is None else idle_seconds

    def add(self, workflow: LessonWorkflow) -> LessonWorkflow:
        self.evict_idle()
        self._workflows[workflow.id] = workflow
        self._touched[workflow.id] = time.monotonic()
        return workflow

    def get(self, workflow_id: str) -> Optional[LessonWorkflow]:
        workflow = self._workflows.get(workflow_id)
        if workflow is not None:
            self._touched[workflow_id] = time.monotonic()
        return workflow

    def discard(self, workflow_id: str) -> None:
        self._workflows.pop(workflow_id, None)
        self._touched.pop(workflow_id, None)

    def evict_idle(self, now: Optional[float] = None) -> int:
        now = time.monotonic() if now is None else now
        stale = [
            workflow_id for workflow_id, touched in self._touched.items()
            if now - touched > self.idle_seconds and not self._workflows[workflow_id].loading
        ]
        for workflow_id in stale:
            self.discard(workflow_id)
        if stale:
            logger.info("Evicted %d idle lesson workflows", len(stale))
        return len(stale)

    def __len__(self) -> int:
        return len(self._workflows)
