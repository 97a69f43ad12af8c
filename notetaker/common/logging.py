# notetaker/common/logging.py
import logging, sys, time, uuid
from pythonjsonlogger import jsonlogger
from flask import g, has_app_context, request

REQUEST_FIELDS = ("request_id", "method", "path", "status", "latency_ms", "backend_calls")


def setup_json_logging(app):
    level = logging.DEBUG if app.debug else logging.INFO
    root = logging.getLogger()
    root.handlers = []
    root.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(jsonlogger.JsonFormatter(
        " ".join(f"%({name})s" for name in ("asctime", "levelname", "name", "message") + REQUEST_FIELDS)
    ))
    root.addHandler(handler)


def current_request_id() -> str:
    return getattr(g, "request_id", "-") if has_app_context() else "-"


def note_backend_call(operation: str) -> None:
    """Records a hosted-backend operation on the request log line."""
    if has_app_context():
        g.setdefault("backend_calls", []).append(operation)


def register_request_logging(app):
    log = logging.getLogger("notetaker.request")

    @app.before_request
    def _start_request():
        g.request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())
        g._start_time = time.monotonic()

    @app.after_request
    def _log_request(resp):
        started = g.get("_start_time", time.monotonic())
        resp.headers.setdefault("X-Request-Id", current_request_id())
        level = logging.WARNING if resp.status_code >= 500 else logging.INFO
        log.log(level, "http_request", extra={
            "request_id": current_request_id(),
            "method": request.method,
            "path": request.path,
            "status": resp.status_code,
            "latency_ms": int((time.monotonic() - started) * 1000),
            "backend_calls": list(g.get("backend_calls", ())),
        })
        return resp

    @app.teardown_request
    def _log_unhandled(exc):
        if exc is not None:
            logging.getLogger("notetaker.error").error(
                "unhandled_exception", exc_info=exc, extra={"request_id": current_request_id()})
