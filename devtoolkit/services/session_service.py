# devtoolkit/services/session_service.py
"""Device session bookkeeping (audit trail, not authorization)"""
from datetime import timedelta
from typing import List, Optional

from flask import current_app
from sqlalchemy import update

from devtoolkit.extensions import db
from devtoolkit.models.user_session import UserSession
from devtoolkit.utils.device import DeviceInfo, detect_browser, detect_device_type, detect_os
from devtoolkit.utils.timeutil import utcnow


def create_session(user_id: int, device_info: DeviceInfo, session_token: str) -> UserSession:
    """Record a login from a device, valid for SESSION_DAYS"""
    now = utcnow()
    user_agent = device_info.user_agent or ''
    session = UserSession(
        user_id=user_id,
        session_token=session_token,
        user_agent=user_agent[:256],
        ip_address=(device_info.ip_address or '')[:45],
        location=device_info.location,
        device_type=detect_device_type(user_agent),
        browser=detect_browser(user_agent),
        os=detect_os(user_agent),
        is_active=True,
        expires_at=now + timedelta(days=current_app.config['SESSION_DAYS']),
        created_at=now,
        last_accessed_at=now,
    )
    db.session.add(session)
    db.session.commit()
    return session


def deactivate_session(session_token: str) -> bool:
    """Mark the session carrying this token inactive"""
    result = db.session.execute(
        update(UserSession)
        .where(UserSession.session_token == session_token, UserSession.is_active.is_(True))
        .values(is_active=False, last_accessed_at=utcnow())
    )
    db.session.commit()
    return result.rowcount > 0


def deactivate_user_sessions(user_id: int) -> int:
    result = db.session.execute(
        update(UserSession)
        .where(UserSession.user_id == user_id, UserSession.is_active.is_(True))
        .values(is_active=False)
    )
    db.session.commit()
    return result.rowcount


def active_sessions(user_id: int, now: Optional[object] = None) -> List[UserSession]:
    now = now or utcnow()
    return (UserSession.query
            .filter(UserSession.user_id == user_id,
                    UserSession.is_active.is_(True),
                    UserSession.expires_at > now)
            .order_by(UserSession.created_at.desc())
            .all())
