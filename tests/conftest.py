# tests/conftest.py
import os, sys
import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))
os.environ["APP_ENV"] = "test"

from notetaker import create_app
from fakes import ALICE, FakeBackend, make_note


@pytest.fixture()
def fake():
    # two notes for Alice, newest first, plus one owned by someone else
    return FakeBackend(notes=[
        make_note("n2", "Second", "two", minutes=2),
        make_note("n1", "First", "one", minutes=1),
        make_note("x1", "Other", "not mine", user_id="u-bob", minutes=3),
    ])


@pytest.fixture()
def signed_in(fake):
    fake.user = ALICE
    return fake


@pytest.fixture()
def app(fake):
    seen = []

    def factory(config, session):
        seen.append(session)
        return fake

    app = create_app(backend_factory=factory)
    app.config.update(TESTING=True)
    app.sessions_seen = seen
    yield app


@pytest.fixture()
def client(app):
    return app.test_client()
