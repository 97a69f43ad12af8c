# tests/test_supabase_backend.py
import logging
from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import pytest
from supabase import AuthError, PostgrestAPIError

from notetaker import create_app
from notetaker.auth.models import AuthSession
from notetaker.backend.supabase_backend import SupabaseBackend
from notetaker.common.errors import BackendError


class FakeAuthError(AuthError):
    def __init__(self, message):
        Exception.__init__(self, message)
        self.message = message


class FakeApiError(PostgrestAPIError):
    def __init__(self, message):
        Exception.__init__(self, message)
        self.message = message


ROW = {
    "id": "7b0c7a7e-0000-4000-8000-000000000001",
    "title": "Groceries",
    "content": "Milk, eggs",
    "user_id": "u1",
    "created_at": "2024-05-01T09:00:00.12345+00:00",
    "updated_at": None,
}


@pytest.fixture()
def client():
    return MagicMock()


def test_restores_stored_session(client):
    SupabaseBackend(client, session=AuthSession("a", "r"))
    client.auth.set_session.assert_called_once_with("a", "r")


def test_invalid_stored_session_is_ignored(client):
    client.auth.set_session.side_effect = FakeAuthError("Invalid Refresh Token")
    SupabaseBackend(client, session=AuthSession("a", "r"))


def test_get_current_user(client):
    client.auth.get_user.return_value = SimpleNamespace(
        user=SimpleNamespace(id="u1", email="a@b.com", confirmed_at=None, identities=[object()]))
    user = SupabaseBackend(client).get_current_user()
    assert (user.id, user.email, user.identities) == ("u1", "a@b.com", 1)

    client.auth.get_user.return_value = None
    assert SupabaseBackend(client).get_current_user() is None


def test_sign_up_reports_zero_identities(client):
    client.auth.sign_up.return_value = SimpleNamespace(
        user=SimpleNamespace(id="u1", email="a@b.com", confirmed_at=None, identities=[]), session=None)
    result = SupabaseBackend(client).sign_up("a@b.com", "secret1", "http://x/auth/callback")
    assert result.user.identities == 0
    assert result.session is None
    client.auth.sign_up.assert_called_once_with({
        "email": "a@b.com",
        "password": "secret1",
        "options": {"email_redirect_to": "http://x/auth/callback"},
    })


def test_sign_in_maps_session_and_errors(client):
    client.auth.sign_in_with_password.return_value = SimpleNamespace(
        user=SimpleNamespace(id="u1", email="a@b.com", confirmed_at=None, identities=None),
        session=SimpleNamespace(access_token="a", refresh_token="r", expires_at=10),
    )
    result = SupabaseBackend(client).sign_in_with_password("a@b.com", "secret1")
    assert result.session == AuthSession("a", "r", 10)

    client.auth.sign_in_with_password.side_effect = FakeAuthError("Invalid login credentials")
    with pytest.raises(BackendError) as exc:
        SupabaseBackend(client).sign_in_with_password("a@b.com", "secret1")
    assert exc.value.message == "Invalid login credentials"


def test_insert_note(client):
    client.table.return_value.insert.return_value.execute.return_value = SimpleNamespace(data=[ROW])
    note = SupabaseBackend(client).insert_note("Groceries", "Milk, eggs", "u1")
    client.table.assert_called_with("notes")
    client.table.return_value.insert.assert_called_once_with(
        {"title": "Groceries", "content": "Milk, eggs", "user_id": "u1"})
    assert note.id == ROW["id"]
    assert note.created_at.year == 2024


def test_select_notes_filters_and_orders(client):
    query = client.table.return_value.select.return_value
    query.eq.return_value.order.return_value.execute.return_value = SimpleNamespace(data=[ROW])
    notes = SupabaseBackend(client, notes_table="my_notes").select_notes("u1")
    client.table.assert_called_with("my_notes")
    query.eq.assert_called_once_with("user_id", "u1")
    query.eq.return_value.order.assert_called_once_with("created_at", desc=True)
    assert [n.title for n in notes] == ["Groceries"]


def test_delete_note_error(client):
    client.table.return_value.delete.return_value.eq.return_value.execute.side_effect = FakeApiError("permission denied")
    with pytest.raises(BackendError) as exc:
        SupabaseBackend(client).delete_note("n1")
    assert exc.value.message == "permission denied"
    assert exc.value.operation == "delete_note"


def _alice(client):
    client.auth.get_user.return_value = SimpleNamespace(
        user=SimpleNamespace(id="u1", email="a@b.com", confirmed_at=None, identities=[object()]))


@pytest.mark.parametrize("call, configure", [
    ("get_current_user", lambda c: setattr(c.auth.get_user, "side_effect", httpx.ConnectError("connection refused"))),
    ("sign_out", lambda c: setattr(c.auth.sign_out, "side_effect", httpx.ReadTimeout("timed out"))),
    ("select_notes", lambda c: setattr(
        c.table.return_value.select.return_value.eq.return_value.order.return_value.execute,
        "side_effect", httpx.ConnectError("connection refused"))),
])
def test_transport_errors_become_backend_errors(client, call, configure):
    configure(client)
    backend = SupabaseBackend(client)
    with pytest.raises(BackendError) as exc:
        getattr(backend, call)(*(["u1"] if call == "select_notes" else []))
    assert exc.value.message in ("connection refused", "timed out")


def test_unreachable_backend_on_restore_is_ignored(client):
    client.auth.set_session.side_effect = httpx.ConnectError("connection refused")
    backend = SupabaseBackend(client, session=AuthSession("a", "r"))
    assert backend.refreshed_session is None


def test_restore_reports_rotated_tokens(client):
    client.auth.get_session.return_value = SimpleNamespace(access_token="a2", refresh_token="r2", expires_at=99)
    backend = SupabaseBackend(client, session=AuthSession("a", "r"))
    assert backend.refreshed_session == AuthSession("a2", "r2", 99)


def test_restore_with_valid_tokens_reports_nothing(client):
    client.auth.get_session.return_value = SimpleNamespace(access_token="a", refresh_token="r", expires_at=99)
    backend = SupabaseBackend(client, session=AuthSession("a", "r"))
    assert backend.refreshed_session is None


# --- pages over an unreachable backend

@pytest.fixture()
def offline_app(client):
    return create_app(backend_factory=lambda config, session: SupabaseBackend(client, session=session))


def test_unreachable_backend_leaves_dashboard_empty(offline_app, client):
    client.auth.get_user.side_effect = httpx.ConnectError("connection refused")
    r = offline_app.test_client().get("/dashboard")
    assert r.status_code == 200
    assert "No notes yet" in r.get_data(as_text=True)


def test_unreachable_backend_start_goes_to_login(offline_app, client):
    client.auth.get_user.side_effect = httpx.ConnectError("connection refused")
    r = offline_app.test_client().post("/start")
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/login")


def test_notes_timeout_leaves_dashboard_empty(offline_app, client):
    _alice(client)
    client.table.return_value.select.return_value.eq.return_value.order.return_value.execute.side_effect = (
        httpx.ReadTimeout("timed out"))
    r = offline_app.test_client().get("/dashboard")
    assert r.status_code == 200
    assert "No notes yet" in r.get_data(as_text=True)


def test_request_log_lists_backend_calls(offline_app, client):
    _alice(client)
    query = client.table.return_value.select.return_value
    query.eq.return_value.order.return_value.execute.return_value = SimpleNamespace(data=[ROW])

    records = []

    class Collect(logging.Handler):
        def emit(self, record):
            records.append(record)

    handler = Collect()
    log = logging.getLogger("notetaker.request")
    log.addHandler(handler)
    try:
        offline_app.test_client().get("/dashboard")
    finally:
        log.removeHandler(handler)

    assert [r.backend_calls for r in records] == [["get_user", "select_notes"]]
    assert records[0].status == 200
