"""Shared fixtures: testing app, database and a recording mail transport"""
import pytest
from sqlalchemy import update

from devtoolkit.app import create_app
from devtoolkit.errors import NotificationDeliveryError
from devtoolkit.extensions import db, notifier
from devtoolkit.models.user import User
from devtoolkit.services.auth_service import AuthService
from devtoolkit.services.token_codec import TokenCodec

PASSWORD = 'Passw0rd!'


class RecordingTransport:
    def __init__(self):
        self.sent = []

    def deliver(self, message):
        self.sent.append(message)

    def kinds(self):
        return [m.kind for m in self.sent]


class FailingTransport:
    def __init__(self):
        self.attempts = 0

    def deliver(self, message):
        self.attempts += 1
        raise NotificationDeliveryError(message.to_address, 'connection refused')


@pytest.fixture
def app():
    app = create_app('testing')
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def ctx(app):
    with app.app_context():
        yield


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def outbox(app):
    transport = RecordingTransport()
    notifier.transport = transport
    return transport


@pytest.fixture
def failing_mail(app):
    transport = FailingTransport()
    notifier.transport = transport
    return transport


def make_user(email='a@b.com', password=PASSWORD, name='Ann Lee', verified=True, role='user'):
    """Register an account and optionally mark it verified (needs an app context)"""
    result = AuthService.register(email, password, name)
    assert result.success, result.message
    values = {'role': role}
    if verified:
        values.update(is_verified=True, verification_token=None, verification_token_expiry=None)
    db.session.execute(update(User).where(User.email == email).values(**values))
    db.session.commit()
    return User.query.filter_by(email=email).first()


@pytest.fixture
def user(ctx, outbox):
    return make_user()


def auth_header(app, email):
    """Bearer header for an existing account"""
    with app.app_context():
        account = User.query.filter_by(email=email).first()
        token = TokenCodec.from_app().issue(account)
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def user_headers(app, outbox):
    with app.app_context():
        make_user('user@devtoolkit.test')
    return auth_header(app, 'user@devtoolkit.test')


@pytest.fixture
def admin_headers(app, outbox):
    with app.app_context():
        make_user('admin@devtoolkit.test', role='admin')
    return auth_header(app, 'admin@devtoolkit.test')
