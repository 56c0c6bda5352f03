"""FastAPI dependencies — the process-wide library, generator and open workflows."""

from functools import lru_cache

from fastapi import Depends

from linguagen.config import settings
from linguagen.database import SessionLocal
from linguagen.services.generator import LessonGenerator
from linguagen.services.library import LessonLibrary
from linguagen.services.record_store import RecordStore
from linguagen.services.students import StudentManager
from linguagen.services.workflow import WorkflowRegistry


@lru_cache
def get_store() -> RecordStore:
    return RecordStore(SessionLocal)


@lru_cache
def get_library() -> LessonLibrary:
    return LessonLibrary(get_store()).load()


def resolve_api_key(store: RecordStore) -> str:
    """The key saved in Settings wins over ANTHROPIC_API_KEY from the environment."""
    return store.load_api_key() or settings.ANTHROPIC_API_KEY


@lru_cache
def get_generator() -> LessonGenerator:
    store = get_store()
    return LessonGenerator(api_key_provider=lambda: resolve_api_key(store))


@lru_cache
def get_registry() -> WorkflowRegistry:
    return WorkflowRegistry()


def get_student_manager(library: LessonLibrary = Depends(get_library)) -> StudentManager:
    return StudentManager(library)
