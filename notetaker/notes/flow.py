"""Notes dashboard state machine.

The note list is an in-memory projection of the backend: it is filled once
on mount and afterwards changed only by confirmed create/delete responses,
never re-fetched.
"""
import logging
from dataclasses import dataclass, replace
from typing import Iterable, Optional, Tuple

from marshmallow import ValidationError

from notetaker.auth.models import User
from notetaker.backend.base import Backend
from notetaker.common.errors import ApiError, BackendError, first_message
from notetaker.notes import service
from notetaker.notes.models import Note

logger = logging.getLogger("notetaker.notes")

ADD_FAILED = "Error adding note"
DELETE_FAILED = "Error deleting note"
LOGOUT_FAILED = "Error logging out"

HOME = "/"


@dataclass(frozen=True)
class DashboardState:
    loading: bool = True
    notes: Tuple[Note, ...] = ()
    user_id: Optional[str] = None
    user_email: Optional[str] = None
    title: str = ""
    content: str = ""
    alert: Optional[str] = None

    @property
    def show_skeleton(self) -> bool:
        # full-page placeholder only before anything is on screen
        return self.loading and not self.notes


def busy(state: DashboardState) -> DashboardState:
    return replace(state, loading=True, alert=None)


def user_resolved(state: DashboardState, user: Optional[User]) -> DashboardState:
    return replace(
        state,
        user_id=user.id if user else None,
        user_email=user.email if user else None,
    )


def notes_loaded(state: DashboardState, notes: Iterable[Note]) -> DashboardState:
    return replace(state, notes=tuple(notes), loading=False)


def form_changed(state: DashboardState, title: str, content: str) -> DashboardState:
    return replace(state, title=title, content=content)


def note_added(state: DashboardState, note: Note) -> DashboardState:
    return replace(state, notes=(note,) + state.notes, title="", content="", loading=False)


def note_removed(state: DashboardState, note_id: str) -> DashboardState:
    return replace(state, notes=tuple(n for n in state.notes if n.id != note_id), loading=False)


def alerted(state: DashboardState, message: str) -> DashboardState:
    return replace(state, alert=message, loading=False)


def idle(state: DashboardState) -> DashboardState:
    return replace(state, loading=False)


def detail_path(note_id: str) -> str:
    return f"/notes/{note_id}"


class DashboardController:
    def __init__(self, backend: Backend):
        self.backend = backend

    def mount(self, state: DashboardState = DashboardState()) -> DashboardState:
        state = replace(state, loading=True)
        try:
            user = self.backend.get_current_user()
            state = user_resolved(state, user)
            if user is None:
                return idle(state)
            return notes_loaded(state, service.list_notes(self.backend, user.id))
        except BackendError as e:
            # initial load degrades to an empty list, no alert
            logger.error("notes_fetch_failed", extra={"error": e.message})
            return idle(state)

    def create(self, state: DashboardState, title: str, content: str) -> DashboardState:
        state = form_changed(busy(state), title, content)
        try:
            note = service.create_note(self.backend, state.user_id, title, content)
        except ValidationError as e:
            return alerted(state, first_message(e))
        except BackendError as e:
            logger.error("note_add_failed", extra={"error": e.message})
            return alerted(state, ADD_FAILED)
        except ApiError as e:
            return alerted(state, e.message)
        return note_added(state, note)

    def delete(self, state: DashboardState, note_id: str) -> DashboardState:
        state = busy(state)
        try:
            service.delete_note(self.backend, note_id)
        except BackendError as e:
            logger.error("note_delete_failed", extra={"error": e.message, "note_id": note_id})
            return alerted(state, DELETE_FAILED)
        return note_removed(state, note_id)

    def logout(self, state: DashboardState) -> Tuple[DashboardState, Optional[str]]:
        state = busy(state)
        try:
            self.backend.sign_out()
        except BackendError as e:
            logger.error("logout_failed", extra={"error": e.message})
            return alerted(state, LOGOUT_FAILED), None
        return idle(state), HOME
