import logging

from flask import Blueprint, current_app, jsonify, make_response, redirect, render_template, request

from notetaker.auth.flow import (
    DASHBOARD, ERROR, SIGN_IN, SIGN_UP, AuthController, AuthOutcome, AuthState, set_mode,
)
from notetaker.auth.schemas import AuthOutcomeOut, UserOut
from notetaker.backend.provider import get_backend
from notetaker.common.errors import BackendError
from notetaker.common.session import forget_session, remember_session, revalidate, store_session
from notetaker.extensions import limiter
from notetaker.notes.service import require_user

logger = logging.getLogger("notetaker.auth")

pages = Blueprint("auth_pages", __name__)
bp = Blueprint("auth", __name__)

outcome_out = AuthOutcomeOut()
user_out = UserOut()


def _controller() -> AuthController:
    return AuthController(get_backend(), current_app.config["APP_URL"])


def _apply_session(resp, outcome: AuthOutcome):
    """Side effects of a confirmed sign-in / sign-up."""
    store_session(outcome.session)
    if outcome.remember:
        remember_session(resp, outcome.session)
    if outcome.revalidate:
        revalidate(resp)
    return resp


def login_page_limit() -> str:
    """The login page also creates accounts; sign-ups count against the register limit."""
    if request.form.get("mode") == SIGN_UP:
        return current_app.config.get("RATELIMIT_AUTH_REGISTER", "10/hour")
    return current_app.config.get("RATELIMIT_AUTH_LOGIN", "5/minute")


# --- HTML

@pages.get("/login")
def login_page():
    state = set_mode(AuthState(), request.args.get("mode", SIGN_IN))
    return render_template("login.html", state=state)


@pages.post("/login")
@limiter.limit(login_page_limit)
def login_submit():
    state = set_mode(AuthState(), request.form.get("mode", SIGN_IN))
    outcome = _controller().submit(state, request.form)
    if outcome.redirect_to:
        return _apply_session(redirect(outcome.redirect_to), outcome)
    status = 400 if outcome.state.status.phase == ERROR else 200
    return render_template("login.html", state=outcome.state), status


@pages.get("/auth/callback")
def auth_callback():
    """Target of the confirmation email; the backend appends token_hash and type."""
    token_hash = request.args.get("token_hash")
    otp_type = request.args.get("type", "email")
    if not token_hash:
        return redirect("/login")
    try:
        result = get_backend().verify_email(token_hash, otp_type)
    except BackendError as e:
        logger.info("email_verification_failed", extra={"error": e.message})
        return redirect("/login")
    store_session(result.session)
    return revalidate(redirect(DASHBOARD))


# --- JSON API

def _api_submit(mode: str, backend_error_status: int):
    payload = request.get_json(silent=True) or {}
    outcome = _controller().submit(set_mode(AuthState(), mode), payload)
    status = outcome.state.status
    if status.phase == ERROR:
        code = 400 if status.code == "validation_error" else backend_error_status
        return jsonify({"error": {"code": status.code, "message": status.message, "details": {}}}), code
    resp = make_response(jsonify(outcome_out.dump(outcome)), 200)
    if outcome.redirect_to:
        _apply_session(resp, outcome)
    return resp


@bp.post("/login")
@limiter.limit(lambda: current_app.config.get("RATELIMIT_AUTH_LOGIN", "5/minute"))
def login():
    return _api_submit(SIGN_IN, 401)


@bp.post("/signup")
@limiter.limit(lambda: current_app.config.get("RATELIMIT_AUTH_REGISTER", "10/hour"))
def signup():
    return _api_submit(SIGN_UP, 400)


@bp.get("/me")
def me():
    user = require_user(get_backend())
    return jsonify(user_out.dump(user)), 200


@bp.post("/logout")
def logout():
    get_backend().sign_out()
    resp = make_response(jsonify({"status": "success", "message": "signed out"}), 200)
    return revalidate(forget_session(resp))
