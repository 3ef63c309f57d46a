"""flask CLI commands"""
from datetime import timedelta

from conftest import make_user
from devtoolkit.extensions import db
from devtoolkit.models.activity_log import ActivityLog
from devtoolkit.models.user import User
from devtoolkit.models.user_session import UserSession
from devtoolkit.services.auth_service import AuthService
from devtoolkit.utils.timeutil import utcnow


def test_init_db(app):
    result = app.test_cli_runner().invoke(args=['init-db'])
    assert 'Initialized the database.' in result.output


def test_create_admin(app):
    result = app.test_cli_runner().invoke(
        args=['create-admin', '--email', 'root@devtoolkit.test', '--password', 'admin-pass-1'])
    assert result.exit_code == 0

    with app.app_context():
        admin = User.query.filter_by(email='root@devtoolkit.test').one()
        assert admin.role == 'admin'
        assert admin.is_verified is True
        assert AuthService.login('root@devtoolkit.test', 'admin-pass-1').success


def test_create_admin_promotes_existing_account(app, outbox):
    with app.app_context():
        make_user('a@b.com')
    app.test_cli_runner().invoke(args=['create-admin', '--email', 'a@b.com', '--password', 'ignored-pass'])
    with app.app_context():
        assert User.query.filter_by(email='a@b.com').one().role == 'admin'


def test_create_admin_requires_password(app):
    result = app.test_cli_runner().invoke(args=['create-admin', '--email', 'root@devtoolkit.test'])
    assert result.exit_code != 0


def test_purge_activity(app, outbox):
    with app.app_context():
        user = make_user('a@b.com')
        now = utcnow()
        db.session.add_all([
            ActivityLog(user_id=user.id, action='user_login', category='auth',
                        timestamp=now - timedelta(days=120)),
            UserSession(user_id=user.id, session_token='old', expires_at=now - timedelta(days=1)),
            UserSession(user_id=user.id, session_token='live', expires_at=now + timedelta(days=1)),
        ])
        db.session.commit()
        recent = ActivityLog.query.count() - 1

    result = app.test_cli_runner().invoke(args=['purge-activity', '--days', '90'])

    assert result.exit_code == 0
    with app.app_context():
        assert ActivityLog.query.count() == recent
        assert [s.session_token for s in UserSession.query.all()] == ['live']


def test_purge_activity_zero_days_keeps_nothing(app, outbox):
    with app.app_context():
        user = make_user('a@b.com')
        db.session.add(ActivityLog(user_id=user.id, action='user_login', category='auth',
                                   timestamp=utcnow() - timedelta(days=1)))
        db.session.commit()

    result = app.test_cli_runner().invoke(args=['purge-activity', '--days', '0'])

    assert result.exit_code == 0
    assert 'older than 0 days' in result.output
    with app.app_context():
        assert ActivityLog.query.filter_by(action='user_login').count() == 0
