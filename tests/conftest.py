import os

# Keep the app's own engine off disk; tests bind their own session below.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_FILE"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from adstudio.database import Base, get_db
from adstudio.errors import AdStudioError
from adstudio.models import secret  # noqa: F401
from adstudio.routes.studio import get_script_generator, get_tts_service
from main import app


class FakeScriptGenerator:
    def __init__(self, script="Acme ships fast. Order today.", error: AdStudioError = None):
        self.script = script
        self.error = error
        self.calls = []

    def generate_script(self, brand_name, description, duration):
        self.calls.append(("generate", brand_name, description, duration))
        if self.error:
            raise self.error
        return self.script

    def shorten_script(self, script, duration, brand_name=""):
        self.calls.append(("shorten", script, duration, brand_name))
        if self.error:
            raise self.error
        return self.script


class FakeTTSService:
    def __init__(self, audio=b"ID3fake-mpeg", voices=None, error: AdStudioError = None):
        self.audio = audio
        self.voices = voices if voices is not None else [
            {"voice_id": "v-rachel", "name": "Rachel", "category": "premade"},
            {"voice_id": "v-adam", "name": "Adam", "category": "premade"},
        ]
        self.error = error
        self.calls = []

    def list_voices(self):
        if self.error:
            raise self.error
        return list(self.voices)

    def synthesize(self, text, voice_id):
        self.calls.append((text, voice_id))
        if self.error:
            raise self.error
        return self.audio


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def script_generator():
    return FakeScriptGenerator()


@pytest.fixture
def tts_service():
    return FakeTTSService()


@pytest.fixture
def api(db_session, script_generator, tts_service):
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_script_generator] = lambda: script_generator
    app.dependency_overrides[get_tts_service] = lambda: tts_service
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
