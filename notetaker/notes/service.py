from typing import List

from notetaker.auth.models import User
from notetaker.backend.base import Backend
from notetaker.common.errors import UnauthenticatedError
from notetaker.notes.models import Note
from notetaker.notes.schemas import NoteIn

MUST_BE_LOGGED_IN = "You must be logged in to add a note."

note_in = NoteIn()


def require_user(backend: Backend) -> User:
    user = backend.get_current_user()
    if user is None:
        raise UnauthenticatedError()
    return user


def list_notes(backend: Backend, user_id: str) -> List[Note]:
    return backend.select_notes(user_id)


def create_note(backend: Backend, user_id, title, content) -> Note:
    """Checks owner and fields locally, then issues exactly one insert."""
    if not user_id:
        raise UnauthenticatedError(MUST_BE_LOGGED_IN)
    note_in.load({"title": title, "content": content})
    return backend.insert_note(title, content, user_id)


def delete_note(backend: Backend, note_id: str) -> None:
    backend.delete_note(note_id)
