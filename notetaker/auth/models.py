from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class User:
    """Identity reported by the backend. Never persisted by this app."""

    id: str
    email: Optional[str] = None
    confirmed_at: Optional[datetime] = None
    # number of linked identities; the backend reports 0 for an email that is already registered
    identities: Optional[int] = None


@dataclass(frozen=True)
class AuthSession:
    access_token: str
    refresh_token: str
    expires_at: Optional[int] = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data) -> Optional["AuthSession"]:
        if not isinstance(data, dict):
            return None
        access, refresh = data.get("access_token"), data.get("refresh_token")
        if not access or not refresh:
            return None
        return cls(access_token=access, refresh_token=refresh, expires_at=data.get("expires_at"))


@dataclass(frozen=True)
class AuthResult:
    """Payload of sign-in / sign-up / email verification."""

    user: Optional[User] = None
    session: Optional[AuthSession] = None
