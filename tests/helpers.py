from datetime import datetime, timedelta

from fastapi.testclient import TestClient

from serene.core.config import settings
from serene.core.security import decode_session_token

DEFAULT_PASSWORD = "secret123"


class FakeClock:
    """Settable clock for stores that stamp created_at."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


def register(client: TestClient, username: str, password: str = DEFAULT_PASSWORD, email: str | None = None):
    return client.post(
        "/api/register",
        json={"username": username, "password": password, "email": email or f"{username}@example.com"},
    )


def session_claims(client: TestClient) -> dict:
    token = client.cookies.get(settings.SESSION_COOKIE_NAME)
    assert token, "no session cookie"
    claims = decode_session_token(token)
    assert claims is not None
    return claims
