"""Verification of application session tokens.

Sessions are HS256 JWTs issued by the auth provider (Supabase) and signed
with the shared ``JWT_SECRET``. The subject claim is the user id.
"""

import logging

import jwt

from .errors import InvalidSessionError
from .models import SessionUser
from .settings import Settings

logger = logging.getLogger(__name__)


def verify_session_token(token: str, settings: Settings) -> SessionUser:
    """Return the user a session token belongs to.

    Raises:
        InvalidSessionError: If the token is malformed, expired, has the
            wrong audience or carries no subject.
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=["HS256"],
            audience=settings.jwt_audience,
        )
    except jwt.ExpiredSignatureError as e:
        raise InvalidSessionError("Session token expired") from e
    except jwt.InvalidTokenError as e:
        raise InvalidSessionError("Invalid or expired token") from e

    subject = payload.get("sub")
    if not subject:
        raise InvalidSessionError("Session token has no subject")
    return SessionUser(id=str(subject), email=payload.get("email"))


def looks_like_jwt(token: str) -> bool:
    """Cheap structural check used before attempting verification."""
    return token.count(".") == 2 and not token.startswith("ya29.")
