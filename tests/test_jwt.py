import uuid
from datetime import timedelta
from types import SimpleNamespace

import pytest
from jose import JWTError

from app.auth.jwt import (
    create_access_token,
    create_refresh_token,
    issue_token_pair,
    token_claims,
    user_id_from_token,
    verify_token,
    REFRESH,
)
from app.models import UserRole


USER = SimpleNamespace(id=uuid.uuid4(), email='ada@school.org', role=UserRole.TEACHER)


def test_token_pair_carries_identity_claims():
    pair = issue_token_pair(USER)

    access = verify_token(pair['access_token'])
    assert access['user_id'] == str(USER.id)
    assert access['email'] == 'ada@school.org'
    assert access['role'] == 'TEACHER'

    assert user_id_from_token(pair['refresh_token'], expected_type=REFRESH) == USER.id


def test_token_types_are_not_interchangeable():
    pair = issue_token_pair(USER)
    with pytest.raises(JWTError):
        verify_token(pair['refresh_token'])
    with pytest.raises(JWTError):
        verify_token(pair['access_token'], expected_type=REFRESH)


def test_expired_token_is_rejected():
    token = create_access_token(token_claims(USER), expires_delta=timedelta(seconds=-1))
    with pytest.raises(JWTError):
        verify_token(token)


def test_missing_or_malformed_user_id():
    with pytest.raises(JWTError):
        user_id_from_token(create_access_token({'email': 'x@school.org'}))
    with pytest.raises(JWTError):
        user_id_from_token(create_refresh_token({'user_id': 'not-a-uuid'}), expected_type=REFRESH)
