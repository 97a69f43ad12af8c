import os
from flask import Flask, current_app, jsonify, request
from flask_limiter import RateLimitExceeded
from dotenv import load_dotenv

from .config import DevConfig, ProdConfig, TestConfig
from .extensions import backend, cors, limiter
from .common.errors import register_error_handlers
from .common.logging import setup_json_logging, register_request_logging
from .common.session import register_session_refresh


def create_app(backend_factory=None):
    # load .env if present (dev)
    load_dotenv()

    app = Flask(__name__)

    env = os.getenv("APP_ENV") or os.getenv("FLASK_ENV", "development")
    if env in ("test", "testing"):
        app.config.from_object(TestConfig)
    elif env == "production":
        app.config.from_object(ProdConfig)
    else:
        app.config.from_object(DevConfig)

    setup_json_logging(app)
    register_request_logging(app)

    # --- Helpers ---
    def _csv(value, default_if_empty):
        """Turns a CSV string into a list, otherwise returns the value or a default."""
        if value is None:
            return default_if_empty
        if isinstance(value, str) and "," in value:
            items = [x.strip() for x in value.split(",") if x.strip()]
            return items if items else default_if_empty
        return value

    # --- CORS: whitelist + headers ---
    origins = _csv(app.config.get("CORS_ORIGINS", "*"), "*")
    allow_headers = _csv(app.config.get("CORS_ALLOW_HEADERS"), ["Authorization", "Content-Type"])
    expose_headers = _csv(app.config.get("CORS_EXPOSE_HEADERS"), ["Content-Type"])

    cors.init_app(app, resources={
        r"/api/*": {
            "origins": origins,
            "allow_headers": allow_headers,
            "expose_headers": expose_headers,
            "supports_credentials": False,
        }
    })

    # --- Limiter: reads RATELIMIT_* from app.config ---
    limiter.init_app(app)

    # --- Backend (auth + notes table), one adapter per request ---
    backend.init_app(app, factory=backend_factory)
    register_session_refresh(app)

    register_error_handlers(app)

    # --- Security headers (single after_request) ---
    @app.after_request
    def set_security_headers(resp):
        if (resp.mimetype or "").startswith("text/html"):
            # server-rendered pages: own assets only, inline styles in templates
            resp.headers["Content-Security-Policy"] = (
                "default-src 'self'; "
                "img-src 'self' data:; "
                "style-src 'self' 'unsafe-inline'; "
                "form-action 'self'; "
                "frame-ancestors 'none'"
            )
        else:
            resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'; base-uri 'none'"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["Referrer-Policy"] = "no-referrer"

        # HSTS only over HTTPS (prod / reverse proxy)
        if (env == "production" or app.config.get("ENFORCE_HTTPS")) and (
            request.is_secure or request.headers.get("X-Forwarded-Proto", "") == "https"
        ):
            resp.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains; preload"

        return resp

    # --- 429 Rate limit JSON ---
    @app.errorhandler(RateLimitExceeded)
    def handle_rate_limit(e):
        return jsonify({"error": {"code": "rate_limited", "message": "Rate limit exceeded.", "details": {}}}), 429

    # --- Blueprints ---
    from .entry.routes import bp as entry_bp
    app.register_blueprint(entry_bp)

    from .auth.routes import pages as auth_pages, bp as auth_bp
    app.register_blueprint(auth_pages)
    app.register_blueprint(auth_bp, url_prefix="/api/v1/auth")

    from .notes.routes import pages as dashboard_pages, bp as notes_bp
    app.register_blueprint(dashboard_pages)
    app.register_blueprint(notes_bp, url_prefix="/api/v1/notes")

    from .docs.routes import bp as docs_bp
    app.register_blueprint(docs_bp)

    # default limit on the whole notes API
    limiter.limit(lambda: current_app.config.get("RATELIMIT_NOTES", "60/minute"))(notes_bp)

    # Liveness check
    @app.get("/healthz")
    def healthz():
        return jsonify({"status": "ok", "env": env})

    # Readiness check (backend configured + Redis when the limiter uses it)
    @app.get("/readyz")
    def readyz():
        status = {"backend": "down", "redis": "n/a"}
        ok = True

        if app.config.get("SUPABASE_URL") and app.config.get("SUPABASE_KEY"):
            status["backend"] = "configured"
        else:
            ok = False

        try:
            uri = app.config.get("RATELIMIT_STORAGE_URI", "memory://")
            if uri.startswith(("redis://", "rediss://")):
                import redis  # late import
                r = redis.from_url(uri)
                r.ping()
                status["redis"] = "up"
        except Exception:
            ok = False
            status["redis"] = "down"

        status["status"] = "ok" if ok else "error"
        return jsonify(status), (200 if ok else 503)

    return app
