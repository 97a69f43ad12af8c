from marshmallow import EXCLUDE, Schema, ValidationError, fields, post_load

from notetaker.notes.models import Note

FILL_ALL_FIELDS = "Please fill in all fields."


def _not_blank(value: str) -> None:
    if not value.strip():
        raise ValidationError(FILL_ALL_FIELDS)


class NoteIn(Schema):
    title = fields.String(required=True, validate=_not_blank,
                          error_messages={"required": FILL_ALL_FIELDS, "null": FILL_ALL_FIELDS})
    content = fields.String(required=True, validate=_not_blank,
                            error_messages={"required": FILL_ALL_FIELDS, "null": FILL_ALL_FIELDS})


class NoteOut(Schema):
    id = fields.String(required=True)
    title = fields.String(required=True)
    content = fields.String(required=True)
    user_id = fields.String(required=True)
    created_at = fields.DateTime(required=True)


class NoteRecord(Schema):
    """Row of the backend `notes` table."""

    class Meta:
        unknown = EXCLUDE

    id = fields.Raw(required=True)
    title = fields.String(required=True)
    content = fields.String(required=True)
    user_id = fields.Raw(required=True)
    created_at = fields.DateTime(required=True)

    @post_load
    def make_note(self, data, **kwargs) -> Note:
        return Note(
            id=str(data["id"]),
            title=data["title"],
            content=data["content"],
            created_at=data["created_at"],
            user_id=str(data["user_id"]),
        )
