from flask import current_app, g

from notetaker.backend.base import Backend


class BackendProvider:
    """Builds one backend adapter per request from the session cookies.

    ``factory(config, session)`` defaults to ``SupabaseBackend.from_config``;
    tests pass their own to run without network access.
    """

    def init_app(self, app, factory=None):
        if factory is None:
            from notetaker.backend.supabase_backend import SupabaseBackend
            factory = SupabaseBackend.from_config
        app.extensions["backend"] = self
        app.extensions["backend_factory"] = factory

        @app.teardown_appcontext
        def _drop_backend(exc):
            g.pop("backend", None)

    def get(self) -> Backend:
        if "backend" not in g:
            from notetaker.common.session import load_session
            stored = load_session()
            factory = current_app.extensions["backend_factory"]
            g.backend = factory(current_app.config, stored)
            fresh = g.backend.refreshed_session
            if stored is not None and fresh is not None and fresh != stored:
                # written back to the cookies once the response is built
                g.session_refresh = (stored, fresh)
        return g.backend


def get_backend() -> Backend:
    return current_app.extensions["backend"].get()
