"""Lesson generator — turns a topic and a student profile into a lesson document.

Both calls return whole documents.  Refinement never patches a field; the model
sends back the full lesson with the requested change applied, and the caller
swaps it in for the old draft.
"""

import json
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Sequence

from pydantic import BaseModel, ValidationError

from linguagen.config import settings
from linguagen.exceptions import GenerationError, MissingCredentialError, RefinementError
from linguagen.schemas.lesson import ChatTurn, LessonDocument, RefineResponse
from linguagen.services import ai_client
from linguagen.services.prompts import (
    FIRST_LESSON_HISTORY,
    GENERATE_LESSON_PROMPT,
    GENERATE_LESSON_SYSTEM,
    HISTORY_TEMPLATE,
    JSON_FORMAT_INSTRUCTIONS,
    PROFILE_TEMPLATE,
    REFINE_LESSON_PROMPT,
    REFINE_LESSON_SYSTEM,
)

logger = logging.getLogger(__name__)

MISSING_API_KEY_MESSAGE = "API Key not found. Please configure it in Settings."

ChatFn = Callable[..., Awaitable[str]]


@dataclass
class RefineResult:
    lesson: dict
    explanation: str


def needs_api_key(message: str) -> bool:
    """True when an error message is about the missing generator credential."""
    return "API Key" in (message or "")


def extract_json(raw: str):
    """Pull the JSON object out of a model reply (code fences and chatter allowed)."""
    text = (raw or "").strip()
    if "```json" in text:
        text = text.split("```json")[1].split("```")[0].strip()
    elif text.startswith("```"):
        text = text.split("```")[1].split("```")[0].strip()

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        start, end = text.find("{"), text.rfind("}")
        if start == -1 or end <= start:
            raise
        return json.loads(text[start:end + 1])


def _profile_block(student: dict) -> str:
    skills = student.get("skills") or {}
    return PROFILE_TEMPLATE.format(
        name=student.get("name", ""),
        interests=student.get("interests", ""),
        likes=student.get("likes", ""),
        dislikes=student.get("dislikes", ""),
        speaking=skills.get("speaking", ""),
        listening=skills.get("listening", ""),
        reading=skills.get("reading", ""),
        writing=skills.get("writing", ""),
    )


def _history_block(previous_topics: Sequence[str]) -> str:
    if not previous_topics:
        return FIRST_LESSON_HISTORY
    return HISTORY_TEMPLATE.format(count=len(previous_topics), topics=", ".join(previous_topics))


def _with_schema(prompt: str, schema: type[BaseModel]) -> str:
    return prompt + JSON_FORMAT_INSTRUCTIONS.format(
        schema=json.dumps(schema.model_json_schema(), indent=2)
    )


class LessonGenerator:
    """Generator collaborator used by the lesson workflow.

    ``api_key_provider`` is asked for the credential on every call, so a key
    saved in Settings takes effect without a restart.  ``chat`` defaults to the
    Anthropic client; tests hand in a fake.
    """

    def __init__(
        self,
        api_key_provider: Callable[[], str],
        chat: Optional[ChatFn] = None,
    ):
        self._api_key_provider = api_key_provider
        self._chat = chat or ai_client.chat

    def _api_key(self) -> str:
        api_key = (self._api_key_provider() or "").strip()
        if not api_key:
            raise MissingCredentialError(MISSING_API_KEY_MESSAGE)
        return api_key

    async def generate_lesson(self, topic: str, student: dict, previous_topics: Sequence[str]) -> dict:
        api_key = self._api_key()

        prompt = GENERATE_LESSON_PROMPT.format(
            topic=topic,
            profile=_profile_block(student),
            history=_history_block(previous_topics),
        )
        try:
            raw = await self._chat(
                system=GENERATE_LESSON_SYSTEM,
                messages=[{"role": "user", "content": _with_schema(prompt, LessonDocument)}],
                api_key=api_key,
                max_tokens=settings.LESSON_MAX_TOKENS,
                temperature=settings.LESSON_LLM_TEMPERATURE,
            )
        except Exception as e:
            logger.warning("Lesson generation failed for topic %r: %s", topic, e)
            raise GenerationError(str(e) or "An error occurred while generating the lesson.") from e

        if not raw or not raw.strip():
            raise GenerationError("No content generated")

        try:
            lesson = LessonDocument.model_validate(extract_json(raw))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning("Generated lesson did not match the schema: %s", e)
            raise GenerationError(f"Generated lesson did not match the lesson schema: {e}") from e

        return lesson.model_dump(exclude_none=True)

    async def refine_lesson(
        self,
        document: dict,
        instruction: str,
        history: Sequence[ChatTurn] = (),
    ) -> RefineResult:
        try:
            api_key = self._api_key()
        except MissingCredentialError as e:
            raise RefinementError(e.message) from e

        history_text = "\n".join(
            f"{'USER' if turn.role == 'user' else 'ASSISTANT'}: {turn.text}" for turn in history
        )
        prompt = REFINE_LESSON_PROMPT.format(
            lesson_json=json.dumps(document, ensure_ascii=False),
            history=history_text,
            instruction=instruction,
        )
        try:
            raw = await self._chat(
                system=REFINE_LESSON_SYSTEM,
                messages=[{"role": "user", "content": _with_schema(prompt, RefineResponse)}],
                api_key=api_key,
                max_tokens=settings.LESSON_MAX_TOKENS,
                temperature=settings.REFINE_LLM_TEMPERATURE,
            )
        except Exception as e:
            logger.warning("Lesson refinement failed: %s", e)
            raise RefinementError(str(e) or "Failed to refine lesson.") from e

        if not raw or not raw.strip():
            raise RefinementError("No content generated during refinement")

        try:
            result = RefineResponse.model_validate(extract_json(raw))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning("Refined lesson did not match the schema: %s", e)
            raise RefinementError(f"Refined lesson did not match the lesson schema: {e}") from e

        return RefineResult(
            lesson=result.lesson.model_dump(exclude_none=True),
            explanation=result.explanation,
        )
