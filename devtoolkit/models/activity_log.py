# devtoolkit/models/activity_log.py
"""Activity log model for the DevToolkit account service
Append-only record of security-relevant events and tool usage
"""
from datetime import timedelta

from devtoolkit.extensions import db
from devtoolkit.utils.timeutil import utcnow

CATEGORIES = ('auth', 'tool_usage', 'profile', 'admin', 'system')
RESULTS = ('success', 'failure', 'warning')


class ActivityLog(db.Model):
    """
    Immutable event entry
    Rows are only ever inserted, and removed by retention (purge_expired)
    """
    __tablename__ = 'activity_logs'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)

    action = db.Column(db.String(64), nullable=False, index=True)
    category = db.Column(db.String(20), nullable=False)
    description = db.Column(db.String(512), nullable=False, default='')
    tool_name = db.Column(db.String(128))
    details = db.Column(db.JSON)

    result = db.Column(db.String(10), nullable=False, default='success')
    level = db.Column(db.String(10), nullable=False, default='info')  # info, warn, error

    ip_address = db.Column(db.String(45))
    user_agent = db.Column(db.String(256))

    timestamp = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)

    def __repr__(self):
        return f'<ActivityLog user_id={self.user_id} action={self.action} result={self.result}>'

    def to_dict(self):
        return {
            'id': self.id,
            'action': self.action,
            'category': self.category,
            'description': self.description,
            'toolName': self.tool_name,
            'details': self.details or {},
            'result': self.result,
            'level': self.level,
            'timestamp': self.timestamp.isoformat(),
        }

    @classmethod
    def purge_expired(cls, days_to_keep=90):
        """Remove entries older than the retention window"""
        cutoff_date = utcnow() - timedelta(days=days_to_keep)
        deleted = cls.query.filter(cls.timestamp < cutoff_date).delete()
        db.session.commit()
        return deleted
