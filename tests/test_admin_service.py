"""Administrative account operations"""
from datetime import timedelta

import pytest
from sqlalchemy import update

from conftest import PASSWORD, make_user
from devtoolkit.errors import ErrorKind
from devtoolkit.extensions import db
from devtoolkit.models.activity_log import ActivityLog
from devtoolkit.models.user import User
from devtoolkit.services import admin_service
from devtoolkit.services.auth_service import AuthService
from devtoolkit.services.quota_service import QuotaService
from devtoolkit.utils.device import DeviceInfo
from devtoolkit.utils.timeutil import utcnow


@pytest.fixture
def admin(ctx, outbox):
    return make_user('admin@b.com', role='admin')


def _admin_actions(admin_id):
    return [e.action for e in ActivityLog.query.filter_by(user_id=admin_id, category='admin')]


def test_list_users_newest_first(admin, user):
    emails = [u.email for u in admin_service.list_users()]
    assert set(emails) == {'admin@b.com', 'a@b.com'}


def test_suspend_blocks_login_and_closes_sessions(admin, user):
    AuthService.login('a@b.com', PASSWORD, DeviceInfo('curl/8.0', '127.0.0.1'))

    result = admin_service.set_user_status(admin.id, user.id, is_suspended=True, reason='abuse')

    assert result.success
    assert result.user.is_suspended is True
    assert result.user.suspension_reason == 'abuse'
    assert AuthService.list_sessions(user.id) == []
    assert AuthService.login('a@b.com', PASSWORD).message == 'Account is suspended'
    assert 'user_status_changed' in _admin_actions(admin.id)


def test_reinstate_clears_reason(admin, user):
    admin_service.set_user_status(admin.id, user.id, is_suspended=True, reason='abuse')
    result = admin_service.set_user_status(admin.id, user.id, is_suspended=False)
    assert result.user.suspension_reason is None
    assert AuthService.login('a@b.com', PASSWORD).success


def test_status_requires_a_flag(admin, user):
    assert admin_service.set_user_status(admin.id, user.id).error is ErrorKind.VALIDATION
    assert admin_service.set_user_status(admin.id, user.id, is_active='no').error is ErrorKind.VALIDATION


def test_status_unknown_user(admin):
    assert admin_service.set_user_status(admin.id, 999, is_active=False).error is ErrorKind.NOT_FOUND


def test_set_limits(admin, user):
    result = admin_service.set_user_limits(admin.id, user.id, 3, 100)

    assert result.success
    assert (result.user.daily_limit, result.user.monthly_limit) == (3, 100)
    assert 'user_limits_changed' in _admin_actions(admin.id)


@pytest.mark.parametrize('daily,monthly', [(0, 10), (-1, 10), ('ten', 10), (5, None), (True, 10)])
def test_set_limits_rejects_non_positive(admin, user, daily, monthly):
    assert admin_service.set_user_limits(admin.id, user.id, daily, monthly).error is ErrorKind.VALIDATION


def test_new_limit_applies_to_gate(admin, user):
    admin_service.set_user_limits(admin.id, user.id, 1, 100)
    quota = QuotaService()
    quota.update_usage(user.id, 'sql-formatter')
    assert quota.can_user_use_ai(user.id).reason == 'Daily usage limit exceeded'


def test_set_role(admin, user):
    result = admin_service.set_user_role(admin.id, user.id, 'moderator')
    assert result.user.role == 'moderator'
    assert admin_service.set_user_role(admin.id, user.id, 'owner').error is ErrorKind.VALIDATION


def test_admin_cannot_demote_self(admin):
    assert not admin_service.set_user_role(admin.id, admin.id, 'user').success


def test_unlock(admin, user):
    db.session.execute(update(User).where(User.id == user.id).values(
        failed_login_attempts=5, locked_until=utcnow() + timedelta(minutes=10)))
    db.session.commit()

    result = admin_service.unlock_user(admin.id, user.id)

    assert result.user.failed_login_attempts == 0
    assert result.user.locked_until is None
    assert AuthService.login('a@b.com', PASSWORD).success


def test_analytics(admin, user):
    quota = QuotaService()
    quota.update_usage(user.id, 'regex-builder')
    quota.update_usage(user.id, 'regex-builder')
    quota.update_usage(user.id, 'json-formatter')
    admin_service.set_user_status(admin.id, user.id, is_suspended=True)

    stats = admin_service.get_analytics()

    assert stats['totalUsers'] == 2
    assert stats['activeUsers'] == 2
    assert stats['verifiedUsers'] == 2
    assert stats['suspendedUsers'] == 1
    assert stats['totalUsage'] == 3
    assert stats['toolUsage'][0] == {'toolName': 'regex-builder', 'count': 2}
    assert stats['recentUsage'] == 3
