from pathlib import Path
import asyncio
import os
import tempfile

import pytest

# Settings are read at import time, so they must be in place before `app` is imported.
_TMP = Path(tempfile.mkdtemp(prefix="quiz-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP / 'test.db'}"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["UPLOAD_DIR"] = str(_TMP / "uploads")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from fastapi.testclient import TestClient  # noqa: E402

from app.database import engine, create_tables, drop_tables  # noqa: E402
from app.main import app  # noqa: E402
from app import models  # noqa: E402,F401


async def _reset_db():
    await engine.dispose()
    await drop_tables()
    await create_tables()
    await engine.dispose()


@pytest.fixture
def client():
    """A client against a freshly created database."""
    asyncio.run(_reset_db())
    with TestClient(app) as c:
        yield c
    asyncio.run(engine.dispose())


def signup(client, email, role="STUDENT", password="secret123", name=None):
    r = client.post('/auth/signup', json={
        'email': email,
        'password': password,
        'name': name or email.split('@')[0],
        'role': role,
    })
    assert r.status_code == 201, r.text
    return r.json()['user']


def login(client, email, password="secret123"):
    r = client.post('/auth/login', json={'email': email, 'password': password})
    assert r.status_code == 200, r.text
    return {'Authorization': f"Bearer {r.json()['access_token']}"}


@pytest.fixture
def teacher(client):
    signup(client, 'teacher@school.org', role='TEACHER')
    return login(client, 'teacher@school.org')


@pytest.fixture
def other_teacher(client):
    signup(client, 'other.teacher@school.org', role='TEACHER')
    return login(client, 'other.teacher@school.org')


@pytest.fixture
def student(client):
    signup(client, 'student@school.org')
    return login(client, 'student@school.org')


@pytest.fixture
def second_student(client):
    signup(client, 'second@school.org')
    return login(client, 'second@school.org')


def sample_questions():
    return [
        {
            'text': 'Capital of France?',
            'type': 'SINGLE_SELECT',
            'options': ['Berlin', 'Paris', 'Rome'],
            'correct_answer': 1,
            'marks': 1,
        },
        {
            'text': 'Pick the primes',
            'type': 'MULTIPLE_SELECT',
            'options': ['2', '4', '5', '9'],
            'correct_answer': [0, 2],
            'marks': 2,
        },
        {
            'text': 'The city of light is ____',
            'type': 'FILL_IN_BLANK',
            'correct_answer': ['Paris', 'paris city'],
            'marks': 1,
        },
        {
            'text': 'Six times seven',
            'type': 'INTEGER',
            'correct_answer': 42,
            'marks': 3,
        },
    ]


@pytest.fixture
def make_quiz(client):
    def _make(headers, **overrides):
        payload = {
            'title': 'Geography and arithmetic',
            'description': 'A short mixed quiz',
            'duration': 15,
            'is_public': False,
            'questions': sample_questions(),
        }
        payload.update(overrides)
        r = client.post('/quiz', json=payload, headers=headers)
        assert r.status_code == 201, r.text
        return r.json()['quiz']
    return _make
