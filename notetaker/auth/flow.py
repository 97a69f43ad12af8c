"""Sign-in / sign-up state machine.

``AuthState`` is immutable; the module-level functions are the transitions
and ``AuthController.submit`` is the only place that talks to the backend.
Front ends render ``AuthOutcome.state`` and apply the outcome's side effects
(store/remember the session, revalidate, redirect).
"""
import logging
from dataclasses import dataclass, replace
from typing import Optional

from marshmallow import ValidationError

from notetaker.auth.models import AuthSession
from notetaker.auth.schemas import CredentialsIn
from notetaker.backend.base import Backend
from notetaker.common.errors import BackendError, first_message

logger = logging.getLogger("notetaker.auth")

SIGN_IN = "sign-in"
SIGN_UP = "sign-up"
MODES = (SIGN_IN, SIGN_UP)

IDLE = "idle"
SUBMITTING = "submitting"
ERROR = "error"
SUCCESS = "success"

ALREADY_REGISTERED = "Account already exists. Please sign in instead."
CHECK_EMAIL = "Please check your email to confirm your account."
SIGN_IN_FAILED = "Failed to sign in"
SIGN_UP_FAILED = "Failed to create account"

DASHBOARD = "/dashboard"

credentials_in = CredentialsIn()


@dataclass(frozen=True)
class AuthStatus:
    phase: str = IDLE
    message: Optional[str] = None
    # "login" (switch to sign-in) or "confirm" (wait for the email)
    next_action: Optional[str] = None
    # "validation_error" | "backend_error" when phase is error
    code: Optional[str] = None


@dataclass(frozen=True)
class AuthState:
    mode: str = SIGN_IN
    status: AuthStatus = AuthStatus()


@dataclass(frozen=True)
class AuthOutcome:
    state: AuthState
    redirect_to: Optional[str] = None
    session: Optional[AuthSession] = None
    remember: bool = False
    revalidate: bool = False


def set_mode(state: AuthState, mode: str) -> AuthState:
    if mode not in MODES:
        mode = SIGN_IN
    return AuthState(mode=mode, status=AuthStatus())


def toggle_mode(state: AuthState) -> AuthState:
    return set_mode(state, SIGN_UP if state.mode == SIGN_IN else SIGN_IN)


def submitted(state: AuthState) -> AuthState:
    return replace(state, status=AuthStatus(phase=SUBMITTING))


def failed(state: AuthState, message: str, code: str = "backend_error") -> AuthState:
    return replace(state, status=AuthStatus(phase=ERROR, message=message, code=code))


def succeeded(state: AuthState, message: Optional[str] = None, next_action: Optional[str] = None) -> AuthState:
    mode = SIGN_IN if next_action == "login" else state.mode
    return AuthState(mode=mode, status=AuthStatus(phase=SUCCESS, message=message, next_action=next_action))


class AuthController:
    def __init__(self, backend: Backend, app_url: str):
        self.backend = backend
        self.app_url = app_url.rstrip("/")

    @property
    def email_redirect_to(self) -> str:
        return f"{self.app_url}/auth/callback"

    def submit(self, state: AuthState, form) -> AuthOutcome:
        state = submitted(state)
        try:
            data = credentials_in.load(form)
        except ValidationError as e:
            return AuthOutcome(state=failed(state, first_message(e), code="validation_error"))

        if state.mode == SIGN_UP:
            return self._sign_up(state, data["email"], data["password"])
        return self._sign_in(state, data["email"], data["password"], data["remember"])

    def _sign_in(self, state, email, password, remember) -> AuthOutcome:
        try:
            result = self.backend.sign_in_with_password(email, password)
        except BackendError as e:
            return AuthOutcome(state=failed(state, e.message or SIGN_IN_FAILED))

        logger.info("signed_in", extra={"remember": remember})
        return AuthOutcome(
            state=succeeded(state),
            redirect_to=DASHBOARD,
            session=result.session,
            remember=remember,
            revalidate=True,
        )

    def _sign_up(self, state, email, password) -> AuthOutcome:
        try:
            result = self.backend.sign_up(email, password, self.email_redirect_to)
        except BackendError as e:
            return AuthOutcome(state=failed(state, e.message or SIGN_UP_FAILED))

        user = result.user
        if user is not None and user.identities == 0:
            return AuthOutcome(state=succeeded(state, ALREADY_REGISTERED, "login"))

        if user is not None and user.confirmed_at:
            logger.info("signed_up_confirmed")
            return AuthOutcome(
                state=succeeded(state),
                redirect_to=DASHBOARD,
                session=result.session,
                revalidate=True,
            )

        return AuthOutcome(state=succeeded(state, CHECK_EMAIL, "confirm"))
