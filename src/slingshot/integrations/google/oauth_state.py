import logging
from datetime import UTC, datetime, timedelta

import jwt

from ...settings import Settings

logger = logging.getLogger(__name__)

STATE_TTL = timedelta(minutes=10)


def create_state_jwt(user_id: str, settings: Settings) -> str:
    """Create a JWT state token binding an OAuth flow to a user."""
    now = datetime.now(UTC)
    payload = {
        "user_id": user_id,
        "purpose": "google_oauth",
        "exp": now + STATE_TTL,
        "iat": now,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm="HS256")


def parse_state_jwt(state: str | None, settings: Settings) -> str | None:
    """Parse and validate a JWT state token, returning the user id."""
    if not state:
        return None
    try:
        payload = jwt.decode(state, settings.jwt_secret, algorithms=["HS256"])
    except jwt.ExpiredSignatureError:
        logger.warning("State token expired")
        return None
    except jwt.InvalidTokenError:
        logger.warning("Invalid state token")
        return None
    if payload.get("purpose") != "google_oauth":
        logger.warning("State token has unexpected purpose")
        return None
    return payload.get("user_id")
