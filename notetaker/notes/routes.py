from flask import Blueprint, jsonify, redirect, render_template, request

from notetaker.backend.provider import get_backend
from notetaker.common.session import forget_session, revalidate
from notetaker.notes import service
from notetaker.notes.flow import DashboardController, DashboardState, alerted, detail_path
from notetaker.notes.schemas import NoteIn, NoteOut

pages = Blueprint("dashboard", __name__)
bp = Blueprint("notes", __name__)

note_in = NoteIn()
note_out = NoteOut()
note_out_many = NoteOut(many=True)


def _render(state, status=200):
    # an alert keeps the page, it only reflects the failure
    return render_template("dashboard.html", state=state, detail_path=detail_path), status


# --- HTML
# Every request mounts the dashboard once, then applies at most one mutation
# to that projection; the page renders the result without another fetch.

@pages.get("/dashboard")
def dashboard():
    return _render(DashboardController(get_backend()).mount())


@pages.post("/dashboard/notes")
def dashboard_create():
    controller = DashboardController(get_backend())
    state = controller.mount()
    state = controller.create(state, request.form.get("title", ""), request.form.get("content", ""))
    return _render(state, 400 if state.alert else 201)


@pages.post("/dashboard/notes/<note_id>/delete")
def dashboard_delete(note_id):
    controller = DashboardController(get_backend())
    state = controller.delete(controller.mount(), note_id)
    return _render(state, 502 if state.alert else 200)


@pages.get("/dashboard/notes/<note_id>")
def dashboard_view(note_id):
    return redirect(detail_path(note_id))


@pages.post("/dashboard/logout")
def dashboard_logout():
    controller = DashboardController(get_backend())
    state, target = controller.logout(DashboardState(loading=False))
    if target is None:
        return _render(alerted(controller.mount(), state.alert), 502)
    return revalidate(forget_session(redirect(target)))


# --- JSON API

@bp.get("/")
def list_notes():
    backend = get_backend()
    user = service.require_user(backend)
    notes = service.list_notes(backend, user.id)
    return jsonify({"status": "success", "data": note_out_many.dump(notes)}), 200


@bp.post("/")
def create_note():
    backend = get_backend()
    user = service.require_user(backend)
    payload = request.get_json(silent=True) or {}
    data = note_in.load(payload)
    note = service.create_note(backend, user.id, data["title"], data["content"])
    return jsonify(note_out.dump(note)), 201


@bp.delete("/<note_id>")
def delete_note(note_id):
    backend = get_backend()
    service.require_user(backend)
    service.delete_note(backend, note_id)
    return ("", 204)
