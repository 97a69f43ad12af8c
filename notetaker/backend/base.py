from abc import ABC, abstractmethod
from typing import List, Optional

from notetaker.auth.models import AuthResult, AuthSession, User
from notetaker.notes.models import Note


class Backend(ABC):
    """Hosted auth + data service, as seen by the flows.

    Every method raises ``BackendError`` on failure; callers only ever look
    at the message.
    """

    # set when restoring the stored session rotated its tokens
    refreshed_session: Optional[AuthSession] = None

    @abstractmethod
    def get_current_user(self) -> Optional[User]:
        """Identity of the current session, ``None`` when signed out."""

    @abstractmethod
    def sign_in_with_password(self, email: str, password: str) -> AuthResult:
        ...

    @abstractmethod
    def sign_up(self, email: str, password: str, email_redirect_to: str) -> AuthResult:
        ...

    @abstractmethod
    def verify_email(self, token_hash: str, otp_type: str) -> AuthResult:
        """Confirms a sign-up from the emailed link."""

    @abstractmethod
    def sign_out(self) -> None:
        ...

    @abstractmethod
    def insert_note(self, title: str, content: str, user_id: str) -> Note:
        """Inserts a row and returns it as stored (id and created_at filled in)."""

    @abstractmethod
    def select_notes(self, user_id: str) -> List[Note]:
        """Notes owned by ``user_id``, newest first."""

    @abstractmethod
    def delete_note(self, note_id: str) -> None:
        ...
