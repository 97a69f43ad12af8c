from marshmallow import EXCLUDE, Schema, fields, validate

EMAIL_REQUIRED = "Valid email is required."
PASSWORD_TOO_SHORT = "Password must be at least 6 characters."


class CredentialsIn(Schema):
    class Meta:
        unknown = EXCLUDE

    email = fields.String(
        required=True,
        validate=validate.Length(min=1, error=EMAIL_REQUIRED),
        error_messages={"required": EMAIL_REQUIRED, "null": EMAIL_REQUIRED, "invalid": EMAIL_REQUIRED},
    )
    password = fields.String(
        required=True,
        load_only=True,
        validate=validate.Length(min=6, error=PASSWORD_TOO_SHORT),
        error_messages={"required": PASSWORD_TOO_SHORT, "null": PASSWORD_TOO_SHORT, "invalid": PASSWORD_TOO_SHORT},
    )
    remember = fields.Boolean(load_default=False, data_key="remember-me")


class UserOut(Schema):
    id = fields.String(required=True)
    email = fields.String(allow_none=True)
    confirmed_at = fields.DateTime(allow_none=True)


class AuthStatusOut(Schema):
    phase = fields.String(required=True)
    message = fields.String(allow_none=True)
    next_action = fields.String(allow_none=True)


class AuthOutcomeOut(Schema):
    mode = fields.Function(lambda o: o.state.mode)
    status = fields.Function(lambda o: AuthStatusOut().dump(o.state.status))
    redirect_to = fields.String(allow_none=True)
