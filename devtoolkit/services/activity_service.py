# devtoolkit/services/activity_service.py
"""Activity logging for the DevToolkit account service"""
from typing import Dict, Optional

from flask import has_request_context, request
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from devtoolkit.extensions import db
from devtoolkit.models.activity_log import ActivityLog

RESULT_LEVELS = {'success': 'info', 'failure': 'error'}


def level_for(result: str) -> str:
    """success -> info, failure -> error, anything else -> warn"""
    return RESULT_LEVELS.get(result, 'warn')


def log_activity(user_id: int, action: str, category: str,
                 details: Optional[Dict] = None, result: str = 'success') -> Optional[ActivityLog]:
    """
    Append an activity entry

    Args:
        user_id: Account the event belongs to
        action: Event name (user_login, tool_used, ...)
        category: auth, tool_usage, profile, admin or system
        details: Optional description, tool_name and metadata
        result: success, failure or warning

    Returns:
        The stored entry, or None if it could not be written
    """
    details = details or {}
    entry = ActivityLog(
        user_id=user_id,
        action=action,
        category=category,
        description=details.get('description', ''),
        tool_name=details.get('tool_name'),
        details=details.get('metadata'),
        result=result,
        level=level_for(result),
    )
    if has_request_context():
        forwarded = request.headers.get('X-Forwarded-For', '').split(',')[0].strip()
        entry.ip_address = (forwarded or request.remote_addr or '')[:45]
        entry.user_agent = (request.headers.get('User-Agent') or '')[:256]

    try:
        db.session.add(entry)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception(f"Failed to record activity {action} for user {user_id}")
        return None

    logger.debug(f"activity user={user_id} action={action} result={result}")
    return entry


def recent_activity(user_id: int, category: Optional[str] = None, limit: int = 50):
    """Newest entries first"""
    query = ActivityLog.query.filter_by(user_id=user_id)
    if category:
        query = query.filter_by(category=category)
    return query.order_by(ActivityLog.timestamp.desc(), ActivityLog.id.desc()).limit(limit).all()
