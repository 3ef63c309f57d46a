"""Bearer token issue/verify"""
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import jwt

from devtoolkit.services.token_codec import TokenCodec

SECRET = 'unit-test-secret'


def _user(role='user'):
    return SimpleNamespace(id=42, email='dev@devtoolkit.test', role=role)


def test_round_trip():
    codec = TokenCodec(SECRET)
    claims = codec.verify(codec.issue(_user()))

    assert claims is not None
    assert claims.user_id == '42'
    assert claims.email == 'dev@devtoolkit.test'
    assert claims.role == 'user'
    assert claims.is_admin is False
    assert claims.expires_at - claims.issued_at == timedelta(days=7)


def test_admin_role_flag():
    codec = TokenCodec(SECRET)
    assert codec.verify(codec.issue(_user('admin'))).is_admin is True


def test_expired_token_is_rejected():
    codec = TokenCodec(SECRET)
    issued = datetime.now(timezone.utc) - timedelta(days=8)
    assert codec.verify(codec.issue(_user(), now=issued)) is None


def test_token_signed_with_other_secret_is_rejected():
    token = TokenCodec('another-secret').issue(_user())
    assert TokenCodec(SECRET).verify(token) is None


def test_tampered_payload_is_rejected():
    codec = TokenCodec(SECRET)
    header, payload, signature = codec.issue(_user()).split('.')
    forged = jwt.encode({'userId': '1', 'email': 'x@y.z', 'role': 'admin',
                         'iat': 0, 'exp': 4102444800}, 'guess', algorithm='HS256')
    assert codec.verify('.'.join([header, forged.split('.')[1], signature])) is None


def test_garbage_and_empty_tokens():
    codec = TokenCodec(SECRET)
    assert codec.verify('not-a-token') is None
    assert codec.verify('') is None
    assert codec.verify(None) is None


def test_missing_claims_are_rejected():
    token = jwt.encode({'userId': '1', 'exp': 4102444800}, SECRET, algorithm='HS256')
    assert TokenCodec(SECRET).verify(token) is None
