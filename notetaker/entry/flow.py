import logging
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from notetaker.auth.models import User
from notetaker.backend.base import Backend
from notetaker.common.errors import BackendError

logger = logging.getLogger("notetaker.entry")

DASHBOARD = "/dashboard"
LOGIN = "/login"


@dataclass(frozen=True)
class EntryState:
    loading: bool = True
    user: Optional[User] = None


def activated(state: EntryState, user: Optional[User]) -> EntryState:
    return replace(state, loading=False, user=user)


def start_requested(state: EntryState) -> EntryState:
    return replace(state, loading=True)


def start_target(user: Optional[User]) -> str:
    return DASHBOARD if user is not None else LOGIN


class EntryController:
    def __init__(self, backend: Backend):
        self.backend = backend

    def _current_user(self) -> Optional[User]:
        try:
            return self.backend.get_current_user()
        except BackendError as e:
            logger.info("entry_user_lookup_failed", extra={"error": e.message})
            return None

    def activate(self, state: EntryState = EntryState()) -> EntryState:
        return activated(state, self._current_user())

    def start(self, state: EntryState) -> Tuple[EntryState, str]:
        """Re-queries the identity (no caching) and picks where to go."""
        state = start_requested(state)
        user = self._current_user()
        return replace(state, user=user), start_target(user)
