from datetime import UTC, datetime, timedelta

import jwt

from slingshot.integrations.google.oauth_state import create_state_jwt, parse_state_jwt


def test_round_trip(settings):
    state = create_state_jwt("user-42", settings)
    assert parse_state_jwt(state, settings) == "user-42"


def test_missing_state(settings):
    assert parse_state_jwt(None, settings) is None
    assert parse_state_jwt("", settings) is None


def test_tampered_state(settings):
    state = create_state_jwt("user-42", settings)
    assert parse_state_jwt(state + "x", settings) is None


def test_expired_state(settings):
    past = datetime.now(UTC) - timedelta(minutes=20)
    state = jwt.encode(
        {"user_id": "user-42", "purpose": "google_oauth", "exp": past},
        settings.jwt_secret,
        algorithm="HS256",
    )
    assert parse_state_jwt(state, settings) is None


def test_session_token_is_not_a_state(settings, make_session_token):
    assert parse_state_jwt(make_session_token(), settings) is None
