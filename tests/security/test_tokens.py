from __future__ import annotations

import jwt
import pytest

from tuition_center.core.exceptions import AuthenticationError
from tuition_center.security.tokens import TokenService


def test_issue_and_decode():
    tokens = TokenService(secret="s3cret", expires_minutes=5)

    claims = tokens.decode(tokens.issue(user_id=7, role="tutor", username="nimal"))

    assert claims.user_id == 7
    assert claims.role == "tutor"
    assert claims.username == "nimal"
    assert claims.jti


def test_each_token_gets_its_own_id():
    tokens = TokenService(secret="s3cret")

    a = tokens.decode(tokens.issue(user_id=1, role="admin", username="admin"))
    b = tokens.decode(tokens.issue(user_id=1, role="admin", username="admin"))

    assert a.jti != b.jti


def test_expired_token_is_rejected():
    tokens = TokenService(secret="s3cret", expires_minutes=-1)

    with pytest.raises(AuthenticationError, match="expired"):
        tokens.decode(tokens.issue(user_id=1, role="admin", username="admin"))


def test_token_signed_with_other_secret_is_rejected():
    token = TokenService(secret="other").issue(user_id=1, role="admin", username="admin")

    with pytest.raises(AuthenticationError):
        TokenService(secret="s3cret").decode(token)


def test_token_without_required_claims_is_rejected():
    token = jwt.encode({"sub": "1"}, "s3cret", algorithm="HS256")

    with pytest.raises(AuthenticationError):
        TokenService(secret="s3cret").decode(token)
