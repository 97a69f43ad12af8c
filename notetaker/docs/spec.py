# notetaker/docs/spec.py
from apispec import APISpec
from apispec.ext.marshmallow import MarshmallowPlugin
from marshmallow import Schema, fields

from notetaker.auth.schemas import AuthOutcomeOut, CredentialsIn, UserOut
from notetaker.notes.schemas import NoteIn, NoteOut


class MessageSchema(Schema):
    status = fields.String()
    message = fields.String()


class ErrorSchema(Schema):
    error = fields.Dict()


def _ref(name: str):
    return {"$ref": f"#/components/schemas/{name}"}


def _json(name: str):
    return {"application/json": {"schema": _ref(name)}}


def build_spec():
    spec = APISpec(
        title="Note Taker API",
        version="1.0.0",
        openapi_version="3.0.3",
        info={"description": "Personal notes on top of a hosted auth + database backend"},
        plugins=[MarshmallowPlugin()],
    )

    # session lives in Flask's signed cookie after login
    spec.components.security_scheme(
        "cookieAuth",
        {"type": "apiKey", "in": "cookie", "name": "notes_auth"},
    )

    spec.components.schema("Credentials", schema=CredentialsIn)
    spec.components.schema("AuthOutcome", schema=AuthOutcomeOut)
    spec.components.schema("User", schema=UserOut)
    spec.components.schema("NoteIn", schema=NoteIn)
    spec.components.schema("NoteOut", schema=NoteOut)
    spec.components.schema("Message", schema=MessageSchema)
    spec.components.schema("Error", schema=ErrorSchema)

    # ---- AUTH ----
    spec.path(
        path="/api/v1/auth/login",
        operations={
            "post": {
                "summary": "Sign in with email and password",
                "requestBody": {"required": True, "content": _json("Credentials")},
                "responses": {
                    "200": {"description": "Signed in", "content": _json("AuthOutcome")},
                    "400": {"description": "Validation error", "content": _json("Error")},
                    "401": {"description": "Rejected by the backend", "content": _json("Error")},
                },
            }
        },
    )

    spec.path(
        path="/api/v1/auth/signup",
        operations={
            "post": {
                "summary": "Create an account",
                "requestBody": {"required": True, "content": _json("Credentials")},
                "responses": {
                    "200": {"description": "Signed up, already registered, or confirmation pending",
                            "content": _json("AuthOutcome")},
                    "400": {"description": "Validation or backend error", "content": _json("Error")},
                },
            }
        },
    )

    spec.path(
        path="/api/v1/auth/me",
        operations={
            "get": {
                "summary": "Get current user",
                "security": [{"cookieAuth": []}],
                "responses": {
                    "200": {"description": "OK", "content": _json("User")},
                    "401": {"description": "Unauthorized", "content": _json("Error")},
                },
            }
        },
    )

    spec.path(
        path="/api/v1/auth/logout",
        operations={
            "post": {
                "summary": "Sign out",
                "security": [{"cookieAuth": []}],
                "responses": {
                    "200": {"description": "Signed out", "content": _json("Message")},
                    "502": {"description": "Backend error", "content": _json("Error")},
                },
            }
        },
    )

    # ---- NOTES ----
    spec.path(
        path="/api/v1/notes/",
        operations={
            "post": {
                "summary": "Create note",
                "security": [{"cookieAuth": []}],
                "requestBody": {"required": True, "content": _json("NoteIn")},
                "responses": {
                    "201": {"description": "Created", "content": _json("NoteOut")},
                    "400": {"description": "Validation error", "content": _json("Error")},
                },
            },
            "get": {
                "summary": "List my notes, newest first",
                "security": [{"cookieAuth": []}],
                "responses": {"200": {"description": "List"}},
            },
        },
    )

    spec.path(
        path="/api/v1/notes/{id}",
        operations={
            "delete": {
                "summary": "Delete note",
                "security": [{"cookieAuth": []}],
                "parameters": [{"in": "path", "name": "id", "required": True, "schema": {"type": "string"}}],
                "responses": {"204": {"description": "No content"}},
            },
        },
    )

    return spec.to_dict()
