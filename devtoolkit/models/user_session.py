# devtoolkit/models/user_session.py
"""Device session model
Audit trail of logins; request authorization relies on the bearer token alone
"""
from devtoolkit.extensions import db
from devtoolkit.utils.timeutil import utcnow


class UserSession(db.Model):
    __tablename__ = 'user_sessions'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    session_token = db.Column(db.String(512), nullable=False, index=True)

    # Device fingerprint
    user_agent = db.Column(db.String(256), nullable=False, default='')
    ip_address = db.Column(db.String(45), nullable=False, default='')
    location = db.Column(db.String(120))
    device_type = db.Column(db.String(10), nullable=False, default='desktop')  # desktop, mobile, tablet
    browser = db.Column(db.String(32))
    os = db.Column(db.String(32))

    is_active = db.Column(db.Boolean, nullable=False, default=True)
    expires_at = db.Column(db.DateTime, nullable=False, index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    last_accessed_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def __repr__(self):
        return f'<UserSession user_id={self.user_id} device={self.device_type} active={self.is_active}>'

    def is_expired(self, now=None):
        return (now or utcnow()) >= self.expires_at

    def to_dict(self):
        return {
            'id': self.id,
            'deviceType': self.device_type,
            'browser': self.browser,
            'os': self.os,
            'ipAddress': self.ip_address,
            'location': self.location,
            'isActive': self.is_active,
            'createdAt': self.created_at.isoformat(),
            'expiresAt': self.expires_at.isoformat(),
            'lastAccessedAt': self.last_accessed_at.isoformat(),
        }

    @classmethod
    def purge_expired(cls, now=None):
        """Remove sessions past their expiry"""
        deleted = cls.query.filter(cls.expires_at < (now or utcnow())).delete()
        db.session.commit()
        return deleted
