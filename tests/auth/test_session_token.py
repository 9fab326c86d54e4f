"""Tests for session token handling."""

from datetime import timedelta

import jwt
import pytest

from matcha.auth.session_token import create_session_token, decode_session_token
from matcha.config import get_settings


class TestSessionToken:
    def test_create_and_decode(self):
        token = create_session_token(user_id=42)
        payload = decode_session_token(token)
        assert payload["user_id"] == 42
        assert payload["type"] == "session"
        assert payload["exp"] > payload["iat"]

    def test_expired_token_rejected(self):
        token = create_session_token(user_id=1, expires_delta=timedelta(seconds=-5))
        with pytest.raises(jwt.InvalidTokenError, match="expired"):
            decode_session_token(token)

    def test_wrong_signature_rejected(self):
        token = jwt.encode({"user_id": 1, "type": "session"}, "not-the-secret", algorithm="HS256")
        with pytest.raises(jwt.InvalidTokenError):
            decode_session_token(token)

    def test_wrong_type_rejected(self):
        settings = get_settings()
        token = jwt.encode({"user_id": 1, "type": "refresh"}, settings.session_secret, algorithm="HS256")
        with pytest.raises(jwt.InvalidTokenError, match="Expected token type"):
            decode_session_token(token)

    def test_missing_type_accepted(self):
        settings = get_settings()
        token = jwt.encode({"user_id": 7}, settings.session_secret, algorithm="HS256")
        assert decode_session_token(token)["user_id"] == 7

    def test_missing_user_id_rejected(self):
        settings = get_settings()
        token = jwt.encode({"type": "session"}, settings.session_secret, algorithm="HS256")
        with pytest.raises(jwt.InvalidTokenError, match="user_id"):
            decode_session_token(token)

    def test_garbage_rejected(self):
        with pytest.raises(jwt.InvalidTokenError):
            decode_session_token("not.a.jwt")
