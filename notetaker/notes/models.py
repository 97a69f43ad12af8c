from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Note:
    id: str
    title: str
    content: str
    created_at: datetime
    # owner; set from the session at creation, never changed
    user_id: str
