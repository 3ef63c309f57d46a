# devtoolkit/services/quota_service.py
"""Quota Service for the DevToolkit account service
Daily AI usage gate with lazy rollover, and usage accounting
"""
from dataclasses import dataclass
from typing import Dict, List, Optional

from flask import current_app
from loguru import logger
from sqlalchemy import or_, update

from devtoolkit.errors import HTTP_STATUS, ErrorKind
from devtoolkit.extensions import db
from devtoolkit.models.user import User
from devtoolkit.services.activity_service import log_activity, recent_activity
from devtoolkit.utils.timeutil import today_in, utcnow


@dataclass
class UsageCheck:
    can_use: bool
    reason: Optional[str] = None
    error: Optional[ErrorKind] = None

    @property
    def http_status(self) -> int:
        return 200 if self.can_use else HTTP_STATUS.get(self.error, 400)

    def __bool__(self):
        return self.can_use


class QuotaService:
    """
    Enforces the per-user daily AI limit

    The daily counter is reset lazily the first time it is read on a new
    calendar day in USAGE_TIMEZONE. The monthly counter is kept for
    reporting and is not part of the gate.
    """

    def __init__(self, timezone: Optional[str] = None):
        self.timezone = timezone or current_app.config['USAGE_TIMEZONE']

    def today(self):
        return today_in(self.timezone)

    def can_user_use_ai(self, user_id) -> UsageCheck:
        """
        Check whether the user may spend one AI unit (does not consume it)

        Args:
            user_id: User ID to check

        Returns:
            UsageCheck(can_use, reason, error); reason and error are set only when refused
        """
        user = _get_user(user_id)
        if not user:
            return UsageCheck(False, 'User not found', ErrorKind.NOT_FOUND)

        if not user.is_active or user.is_suspended:
            return UsageCheck(False, 'Account is suspended', ErrorKind.ACCOUNT_STATE)

        today = self.today()
        if user.last_reset_date != today:
            self._rollover(user.id, today)
            db.session.refresh(user)

        if user.daily_count >= user.daily_limit:
            return UsageCheck(False, 'Daily usage limit exceeded', ErrorKind.QUOTA_EXCEEDED)

        return UsageCheck(True)

    def _rollover(self, user_id, today) -> bool:
        """Zero the daily counter once per day; a no-op if another request got there first"""
        result = db.session.execute(
            update(User)
            .where(User.id == user_id,
                   or_(User.last_reset_date.is_(None), User.last_reset_date != today))
            .values(daily_count=0, last_reset_date=today)
            .execution_options(synchronize_session=False)
        )
        db.session.commit()
        if result.rowcount:
            logger.debug(f"Daily usage reset for user {user_id} on {today.isoformat()}")
        return result.rowcount > 0

    def update_usage(self, user_id, tool_name: str, success: bool = True) -> bool:
        """
        Record one AI call, whether or not the tool succeeded

        Args:
            user_id: User ID consuming the unit
            tool_name: Tool that was invoked
            success: Outcome of the tool call, recorded on the activity entry

        Returns:
            True if the counters were incremented
        """
        user = _get_user(user_id)
        if not user:
            logger.warning(f"Usage update for unknown user {user_id}")
            return False

        now = utcnow()
        db.session.execute(
            update(User)
            .where(User.id == user.id)
            .values(daily_count=User.daily_count + 1,
                    monthly_count=User.monthly_count + 1,
                    total_count=User.total_count + 1,
                    last_usage_date=now,
                    last_activity=now)
            .execution_options(synchronize_session=False)
        )
        db.session.commit()

        log_activity(user.id, 'tool_used', 'tool_usage', {
            'description': f'Used {tool_name}',
            'tool_name': tool_name,
            'metadata': {'success': success},
        }, 'success' if success else 'failure')
        return True

    def get_usage_summary(self, user_id) -> Dict:
        """
        Current counters and limits; a stale daily counter reads as zero

        Args:
            user_id: User ID to summarize

        Returns:
            Dictionary with usage metrics, empty if the user does not exist
        """
        user = _get_user(user_id)
        if not user:
            return {}

        daily_count = user.daily_count if user.last_reset_date == self.today() else 0
        return {
            'dailyCount': daily_count,
            'dailyLimit': user.daily_limit,
            'remainingToday': max(0, user.daily_limit - daily_count),
            'monthlyCount': user.monthly_count,
            'monthlyLimit': user.monthly_limit,
            'totalCount': user.total_count,
            'lastUsageDate': user.last_usage_date.isoformat() if user.last_usage_date else None,
        }

    def get_usage_history(self, user_id, limit: int = 50) -> List[Dict]:
        """Recent tool calls, newest first"""
        entries = recent_activity(user_id, category='tool_usage', limit=limit)
        return [
            {
                'id': entry.id,
                'toolName': entry.tool_name,
                'success': entry.result == 'success',
                'timestamp': entry.timestamp.isoformat(),
            }
            for entry in entries
        ]


def _get_user(user_id) -> Optional[User]:
    try:
        return db.session.get(User, int(user_id))
    except (TypeError, ValueError):
        return None
