"""Shared fixtures: an in-memory record store, a loaded library and sample lessons."""

import copy
import json
import os
import sys

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from linguagen.database import init_db
from linguagen.services.generator import LessonGenerator
from linguagen.services.library import LessonLibrary
from linguagen.services.record_store import RecordStore
from linguagen.services.students import StudentManager

SAMPLE_LESSON = {
    "lesson_metadata": {"lesson_number": 7, "lesson_title": "Going Places", "category": "Input Lesson"},
    "student_book_content": {
        "verbs_header": [
            {"english": "to travel", "portuguese": "viajar"},
            {"english": "to book", "portuguese": "reservar"},
        ],
        "new_words": [
            {"english": "ticket", "portuguese": "passagem"},
            {"english": "suitcase", "portuguese": "mala"},
            {"english": "airport", "portuguese": "aeroporto"},
        ],
        "useful_phrases": [
            {"english": "Where is the gate?", "portuguese": "Onde fica o portão?"},
        ],
        "grammar": {
            "topics": ["going to"],
            "examples": [{"english": "I am going to travel.", "portuguese": "Eu vou viajar."}],
        },
        "real_life": [{"english": "I booked a flight to Lisbon.", "portuguese": "Reservei um voo para Lisboa."}],
        "check_it_out": {
            "boxes": [{"title": "Tip", "content": ["Say 'flight', not 'fly'.", "Gate = portão"]}],
        },
    },
    "teachers_guide_content": {
        "header_info": {"learning_objectives": ["Talk about trips"], "grammar_focus": ["going to"]},
        "assessment": {
            "duration_minutes": 5,
            "questions": [{"question": "Translate: mala", "answer": "suitcase"}],
        },
        "drills": {
            "verbs_drill": {"duration_minutes": 8, "sentences": ["I travel a lot. / Eu viajo muito. / she / they"]},
            "new_words_drill": {"duration_minutes": 12, "sentences": ["I need a ticket. / Preciso de uma passagem. / suitcase"]},
            "useful_phrases_drill": {"duration_minutes": 6, "sentences": ["Where is the gate? / Onde fica o portão? / exit"]},
            "grammar_drill": {"duration_minutes": 12, "sentences": ["I am going to fly. / Eu vou voar. / drive"]},
        },
        "procedures": {
            "homework_instructions": ["Write five sentences about your next trip."],
            "skills_check": {"skills": ["speaking", "listening"]},
        },
    },
}


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def store(session_factory):
    return RecordStore(session_factory)


@pytest.fixture
def library(store):
    return LessonLibrary(store).load()


@pytest.fixture
def manager(library):
    return StudentManager(library)


@pytest.fixture
def lesson_doc():
    return copy.deepcopy(SAMPLE_LESSON)


class FakeChat:
    """Stands in for ai_client.chat: replays queued replies and records each call."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls = []

    async def __call__(self, **kwargs):
        self.calls.append(kwargs)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, (dict, list)):
            return json.dumps(reply)
        return reply


@pytest.fixture
def fake_chat():
    return FakeChat()


@pytest.fixture
def generator(fake_chat):
    return LessonGenerator(api_key_provider=lambda: "test-key", chat=fake_chat)
