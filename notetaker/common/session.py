import json
from typing import Optional

from flask import current_app, g, request, session

from notetaker.auth.models import AuthSession

_KEY = "auth"


def load_session() -> Optional[AuthSession]:
    """Backend session of the current request: signed cookie first, then remember-me."""
    stored = AuthSession.from_dict(session.get(_KEY))
    if stored is not None:
        return stored
    raw = request.cookies.get(current_app.config["REMEMBER_COOKIE_NAME"])
    if not raw:
        return None
    try:
        return AuthSession.from_dict(json.loads(raw))
    except ValueError:
        return None


def store_session(auth_session: Optional[AuthSession]) -> None:
    if auth_session is not None:
        session[_KEY] = auth_session.to_dict()


def remember_session(resp, auth_session: Optional[AuthSession]):
    if auth_session is None:
        return resp
    resp.set_cookie(
        current_app.config["REMEMBER_COOKIE_NAME"],
        json.dumps(auth_session.to_dict(), separators=(",", ":")),
        max_age=current_app.config["REMEMBER_COOKIE_MAX_AGE"],
        path="/",
    )
    return resp


def forget_session(resp):
    g.session_forgotten = True
    session.pop(_KEY, None)
    resp.delete_cookie(current_app.config["REMEMBER_COOKIE_NAME"], path="/")
    return resp


def revalidate(resp):
    # browsers drop cached pages of this origin
    resp.headers["Clear-Site-Data"] = '"cache"'
    return resp


def register_session_refresh(app):
    """Persists tokens the backend rotated while restoring the stored session."""

    @app.after_request
    def _write_back_refreshed_session(resp):
        refresh = g.get("session_refresh")
        if refresh is None or g.get("session_forgotten"):
            return resp
        stale, fresh = refresh
        current = session.get(_KEY)
        if current is not None and current != stale.to_dict():
            # signed in again during this request
            return resp
        store_session(fresh)
        if request.cookies.get(current_app.config["REMEMBER_COOKIE_NAME"]):
            remember_session(resp, fresh)
        return resp
