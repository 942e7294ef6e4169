"""Password hashing and cookie-based session authentication."""

import bcrypt
from fastapi import Request
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from zyra.common.exceptions import AuthenticationError

COOKIE_NAME = "zyra_session"


def hash_password(plaintext: str) -> str:
    """Hash a plaintext password with bcrypt."""
    return bcrypt.hashpw(plaintext.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plaintext: str, hashed: str) -> bool:
    """Verify a plaintext password against a bcrypt hash."""
    try:
        return bcrypt.checkpw(plaintext.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


def _get_serializer() -> URLSafeTimedSerializer:
    from zyra.common.config import get_settings
    return URLSafeTimedSerializer(get_settings().secret_key, salt="zyra-session")


def create_session_cookie(user_id: str) -> str:
    """Sign a session payload and return the cookie value."""
    s = _get_serializer()
    return s.dumps({"uid": user_id})


def verify_session_cookie(cookie: str) -> dict | None:
    """Verify and decode a session cookie. Returns payload or None."""
    from zyra.common.config import get_settings

    s = _get_serializer()
    try:
        return s.loads(cookie, max_age=get_settings().session_max_age)
    except (BadSignature, SignatureExpired):
        return None


def get_session_user_id(request: Request) -> str | None:
    """Extract the user id from the request's session cookie, if valid."""
    cookie = request.cookies.get(COOKIE_NAME)
    if not cookie:
        return None
    payload = verify_session_cookie(cookie)
    if not payload:
        return None
    return payload.get("uid")


async def require_user(request: Request):
    """FastAPI dependency that resolves the logged-in user or raises 401."""
    user_id = get_session_user_id(request)
    if user_id is None:
        raise AuthenticationError()

    from zyra.deps import get_store
    user = await get_store().get_user(user_id)
    if user is None:
        raise AuthenticationError()
    return user
