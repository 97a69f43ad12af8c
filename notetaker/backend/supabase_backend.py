import logging
from typing import List, Optional

import httpx
from marshmallow import ValidationError
from supabase import AuthError, AuthSessionMissingError, Client, PostgrestAPIError, create_client

from notetaker.auth.models import AuthResult, AuthSession, User
from notetaker.backend.base import Backend
from notetaker.common.errors import BackendError
from notetaker.common.logging import note_backend_call
from notetaker.notes.models import Note
from notetaker.notes.schemas import NoteRecord

logger = logging.getLogger("notetaker.backend")

# transport failures (unreachable host, timeouts) count as backend errors too
AUTH_ERRORS = (AuthError, httpx.HTTPError)
DATA_ERRORS = (PostgrestAPIError, httpx.HTTPError)

note_record = NoteRecord()
note_records = NoteRecord(many=True)


def _message(exc: Exception) -> str:
    return getattr(exc, "message", None) or str(exc) or type(exc).__name__


def _user(raw) -> Optional[User]:
    if raw is None:
        return None
    identities = getattr(raw, "identities", None)
    return User(
        id=str(raw.id),
        email=getattr(raw, "email", None),
        confirmed_at=getattr(raw, "confirmed_at", None),
        identities=len(identities) if identities is not None else None,
    )


def _session(raw) -> Optional[AuthSession]:
    if raw is None:
        return None
    return AuthSession(
        access_token=raw.access_token,
        refresh_token=raw.refresh_token,
        expires_at=getattr(raw, "expires_at", None),
    )


def _auth_result(resp) -> AuthResult:
    return AuthResult(user=_user(getattr(resp, "user", None)), session=_session(getattr(resp, "session", None)))


class SupabaseBackend(Backend):
    def __init__(self, client: Client, notes_table: str = "notes", session: Optional[AuthSession] = None):
        self._client = client
        self._table = notes_table
        if session is not None:
            self._restore(session)

    @classmethod
    def from_config(cls, config, session: Optional[AuthSession] = None) -> "SupabaseBackend":
        client = create_client(config["SUPABASE_URL"], config["SUPABASE_KEY"])
        return cls(client, notes_table=config.get("NOTES_TABLE", "notes"), session=session)

    def _restore(self, session: AuthSession) -> None:
        note_backend_call("set_session")
        try:
            # refreshes (and rotates) the tokens when the access token has expired
            self._client.auth.set_session(session.access_token, session.refresh_token)
            current = _session(self._client.auth.get_session())
        except AUTH_ERRORS as e:
            logger.warning("session_restore_failed", extra={"error": _message(e)})
            return
        if current is not None and (current.access_token, current.refresh_token) != (
            session.access_token, session.refresh_token
        ):
            self.refreshed_session = current

    def _fail(self, operation: str, exc: Exception) -> BackendError:
        message = _message(exc)
        logger.warning("backend_error", extra={"operation": operation, "error": message})
        return BackendError(message, operation=operation)

    # --- auth

    def get_current_user(self) -> Optional[User]:
        note_backend_call("get_user")
        try:
            resp = self._client.auth.get_user()
        except AuthSessionMissingError:
            return None
        except AUTH_ERRORS as e:
            raise self._fail("get_user", e)
        return _user(resp.user) if resp else None

    def sign_in_with_password(self, email: str, password: str) -> AuthResult:
        note_backend_call("sign_in")
        try:
            resp = self._client.auth.sign_in_with_password({"email": email, "password": password})
        except AUTH_ERRORS as e:
            raise self._fail("sign_in", e)
        return _auth_result(resp)

    def sign_up(self, email: str, password: str, email_redirect_to: str) -> AuthResult:
        note_backend_call("sign_up")
        try:
            resp = self._client.auth.sign_up({
                "email": email,
                "password": password,
                "options": {"email_redirect_to": email_redirect_to},
            })
        except AUTH_ERRORS as e:
            raise self._fail("sign_up", e)
        return _auth_result(resp)

    def verify_email(self, token_hash: str, otp_type: str) -> AuthResult:
        note_backend_call("verify_otp")
        try:
            resp = self._client.auth.verify_otp({"token_hash": token_hash, "type": otp_type})
        except AUTH_ERRORS as e:
            raise self._fail("verify_otp", e)
        return _auth_result(resp)

    def sign_out(self) -> None:
        note_backend_call("sign_out")
        try:
            self._client.auth.sign_out()
        except AUTH_ERRORS as e:
            raise self._fail("sign_out", e)

    # --- notes

    def insert_note(self, title: str, content: str, user_id: str) -> Note:
        note_backend_call("insert_note")
        try:
            resp = (
                self._client.table(self._table)
                .insert({"title": title, "content": content, "user_id": user_id})
                .execute()
            )
        except DATA_ERRORS as e:
            raise self._fail("insert_note", e)
        if not resp.data:
            raise BackendError("Insert returned no row.", operation="insert_note")
        try:
            return note_record.load(resp.data[0])
        except ValidationError as e:
            raise self._fail("insert_note", e)

    def select_notes(self, user_id: str) -> List[Note]:
        note_backend_call("select_notes")
        try:
            resp = (
                self._client.table(self._table)
                .select("*")
                .eq("user_id", user_id)
                .order("created_at", desc=True)
                .execute()
            )
        except DATA_ERRORS as e:
            raise self._fail("select_notes", e)
        try:
            return note_records.load(resp.data or [])
        except ValidationError as e:
            raise self._fail("select_notes", e)

    def delete_note(self, note_id: str) -> None:
        note_backend_call("delete_note")
        try:
            self._client.table(self._table).delete().eq("id", note_id).execute()
        except DATA_ERRORS as e:
            raise self._fail("delete_note", e)
