from flask import Blueprint, redirect, render_template

from notetaker.backend.provider import get_backend
from notetaker.entry.flow import EntryController, EntryState

bp = Blueprint("entry", __name__)


@bp.get("/")
def index():
    state = EntryController(get_backend()).activate()
    return render_template("index.html", state=state)


@bp.post("/start")
def start():
    _, target = EntryController(get_backend()).start(EntryState(loading=False))
    return redirect(target)
