# tests/test_entry.py
def test_unauthenticated_visit_then_start_goes_to_login(client, fake):
    r = client.get("/")
    assert r.status_code == 200
    body = r.get_data(as_text=True)
    assert "Note Taker" in body
    assert "Start taking notes" in body

    r = client.post("/start")
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/login")
    assert fake.call_names() == ["get_current_user", "get_current_user"]


def test_start_with_session_goes_to_dashboard(client, signed_in):
    r = client.post("/start")
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/dashboard")


def test_start_when_backend_fails_goes_to_login(client, fake):
    fake.fail["get_current_user"] = "network down"
    r = client.post("/start")
    assert r.headers["Location"].endswith("/login")


def test_index_template_shows_spinner_while_loading(app):
    from flask import render_template
    from notetaker.entry.flow import EntryState

    with app.test_request_context("/"):
        body = render_template("index.html", state=EntryState())
    assert 'class="spinner"' in body
    assert "Start taking notes" not in body
