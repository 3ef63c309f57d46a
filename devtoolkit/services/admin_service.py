# devtoolkit/services/admin_service.py
"""Administrative operations on accounts"""
from datetime import timedelta
from typing import Dict, List, Optional

from loguru import logger
from sqlalchemy import func, update

from devtoolkit.errors import ErrorKind, ServiceResult
from devtoolkit.extensions import db
from devtoolkit.models.activity_log import ActivityLog
from devtoolkit.models.user import ROLES, User
from devtoolkit.services import session_service
from devtoolkit.services.activity_service import log_activity
from devtoolkit.utils.timeutil import utcnow

RECENT_USAGE_DAYS = 7


def _get_user(user_id) -> Optional[User]:
    try:
        return db.session.get(User, int(user_id))
    except (TypeError, ValueError):
        return None


def _positive_int(value) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def _apply(user_id, **values):
    db.session.execute(
        update(User)
        .where(User.id == user_id)
        .values(updated_at=utcnow(), **values)
    )
    db.session.commit()


def list_users() -> List[User]:
    """All accounts, newest first"""
    return User.query.order_by(User.created_at.desc(), User.id.desc()).all()


def set_user_status(admin_id, user_id, is_active: Optional[bool] = None,
                    is_suspended: Optional[bool] = None, reason: Optional[str] = None) -> ServiceResult:
    """
    Activate, deactivate, suspend or reinstate an account

    Deactivating or suspending also closes the account's device sessions.
    """
    user = _get_user(user_id)
    if not user:
        return ServiceResult.fail(ErrorKind.NOT_FOUND, 'User not found')

    if is_active is None and is_suspended is None:
        return ServiceResult.fail(ErrorKind.VALIDATION, 'isActive or isSuspended is required')
    for flag in (is_active, is_suspended):
        if flag is not None and not isinstance(flag, bool):
            return ServiceResult.fail(ErrorKind.VALIDATION, 'Status flags must be booleans')

    values = {}
    if is_active is not None:
        values['is_active'] = is_active
    if is_suspended is not None:
        values['is_suspended'] = is_suspended
        values['suspension_reason'] = reason if is_suspended else None
    _apply(user.id, **values)

    if is_active is False or is_suspended is True:
        closed = session_service.deactivate_user_sessions(user.id)
        logger.info(f"Closed {closed} session(s) for user {user.id}")

    log_activity(admin_id, 'user_status_changed', 'admin', {
        'description': f'Status updated for user {user.id}',
        'metadata': {'userId': user.id, 'isActive': is_active,
                     'isSuspended': is_suspended, 'reason': reason},
    })

    return ServiceResult.ok('User status updated successfully', user=_get_user(user.id))


def set_user_limits(admin_id, user_id, daily_limit, monthly_limit) -> ServiceResult:
    """Replace the daily and monthly limits (positive integers)"""
    user = _get_user(user_id)
    if not user:
        return ServiceResult.fail(ErrorKind.NOT_FOUND, 'User not found')

    daily = _positive_int(daily_limit)
    monthly = _positive_int(monthly_limit)
    if daily is None or monthly is None:
        return ServiceResult.fail(ErrorKind.VALIDATION, 'Limits must be positive integers')

    _apply(user.id, daily_limit=daily, monthly_limit=monthly)

    log_activity(admin_id, 'user_limits_changed', 'admin', {
        'description': f'Usage limits updated for user {user.id}',
        'metadata': {'userId': user.id, 'dailyLimit': daily, 'monthlyLimit': monthly},
    })

    return ServiceResult.ok('User limits updated successfully', user=_get_user(user.id))


def set_user_role(admin_id, user_id, role: str) -> ServiceResult:
    user = _get_user(user_id)
    if not user:
        return ServiceResult.fail(ErrorKind.NOT_FOUND, 'User not found')

    if role not in ROLES:
        return ServiceResult.fail(ErrorKind.VALIDATION, f"Role must be one of: {', '.join(ROLES)}")

    if str(user.id) == str(admin_id) and role != 'admin':
        return ServiceResult.fail(ErrorKind.VALIDATION, 'Admins cannot remove their own admin role')

    _apply(user.id, role=role)

    log_activity(admin_id, 'user_role_changed', 'admin', {
        'description': f'Role for user {user.id} set to {role}',
        'metadata': {'userId': user.id, 'role': role},
    })

    return ServiceResult.ok('User role updated successfully', user=_get_user(user.id))


def unlock_user(admin_id, user_id) -> ServiceResult:
    """Clear a lockout and the failed attempt counter"""
    user = _get_user(user_id)
    if not user:
        return ServiceResult.fail(ErrorKind.NOT_FOUND, 'User not found')

    _apply(user.id, failed_login_attempts=0, locked_until=None)

    log_activity(admin_id, 'user_unlocked', 'admin', {
        'description': f'Lockout cleared for user {user.id}',
        'metadata': {'userId': user.id},
    })

    return ServiceResult.ok('User unlocked successfully', user=_get_user(user.id))


def get_analytics(now=None) -> Dict:
    """Account totals and AI usage broken down by tool"""
    now = now or utcnow()

    total_users = db.session.query(func.count(User.id)).scalar()
    active_users = db.session.query(func.count(User.id)).filter(User.is_active.is_(True)).scalar()
    verified_users = db.session.query(func.count(User.id)).filter(User.is_verified.is_(True)).scalar()
    suspended_users = db.session.query(func.count(User.id)).filter(User.is_suspended.is_(True)).scalar()
    total_usage = db.session.query(func.coalesce(func.sum(User.total_count), 0)).scalar()

    tool_rows = (db.session.query(ActivityLog.tool_name, func.count(ActivityLog.id))
                 .filter(ActivityLog.action == 'tool_used')
                 .group_by(ActivityLog.tool_name)
                 .order_by(func.count(ActivityLog.id).desc())
                 .all())

    recent_usage = (db.session.query(func.count(ActivityLog.id))
                    .filter(ActivityLog.action == 'tool_used',
                            ActivityLog.timestamp >= now - timedelta(days=RECENT_USAGE_DAYS))
                    .scalar())

    return {
        'totalUsers': total_users,
        'activeUsers': active_users,
        'verifiedUsers': verified_users,
        'suspendedUsers': suspended_users,
        'totalUsage': int(total_usage or 0),
        'toolUsage': [{'toolName': name, 'count': count} for name, count in tool_rows],
        'recentUsage': recent_usage,
    }
