# devtoolkit/models/user.py
"""User model for the DevToolkit account service
Credential store: identity, authentication state, quotas and status flags
"""
from devtoolkit.extensions import db
from devtoolkit.utils.timeutil import utcnow

ROLES = ('user', 'admin', 'moderator')


class User(db.Model):
    """Account record, unique by email (exact match, stored as given)"""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(128), nullable=False)

    # Profile
    first_name = db.Column(db.String(100))
    last_name = db.Column(db.String(100))
    avatar = db.Column(db.String(512))
    bio = db.Column(db.Text)
    website = db.Column(db.String(255))
    location = db.Column(db.String(120))

    # Preferences
    theme = db.Column(db.String(10), nullable=False, default='system')  # light, dark, system
    language = db.Column(db.String(10), nullable=False, default='en')
    timezone = db.Column(db.String(64), nullable=False, default='UTC')
    email_notifications = db.Column(db.Boolean, nullable=False, default=True)

    # Authentication state
    is_verified = db.Column(db.Boolean, nullable=False, default=False)
    verification_token = db.Column(db.String(64), index=True)
    verification_token_expiry = db.Column(db.DateTime)
    reset_token = db.Column(db.String(64), index=True)
    reset_token_expiry = db.Column(db.DateTime)
    failed_login_attempts = db.Column(db.Integer, nullable=False, default=0)
    locked_until = db.Column(db.DateTime)
    last_password_change = db.Column(db.DateTime)

    role = db.Column(db.String(20), nullable=False, default='user', index=True)

    # AI usage accounting
    daily_count = db.Column(db.Integer, nullable=False, default=0)
    monthly_count = db.Column(db.Integer, nullable=False, default=0)
    total_count = db.Column(db.Integer, nullable=False, default=0)
    daily_limit = db.Column(db.Integer, nullable=False, default=50)
    monthly_limit = db.Column(db.Integer, nullable=False, default=1000)
    last_reset_date = db.Column(db.Date)
    last_usage_date = db.Column(db.DateTime)

    # Status
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)
    is_suspended = db.Column(db.Boolean, nullable=False, default=False)
    suspension_reason = db.Column(db.String(255))
    last_login = db.Column(db.DateTime)
    last_activity = db.Column(db.DateTime)

    # Metadata
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    source = db.Column(db.String(10), nullable=False, default='web')  # web, api, admin
    ip_address = db.Column(db.String(45))  # IPv6 support
    user_agent = db.Column(db.String(256))

    # Relationships
    sessions = db.relationship('UserSession', backref='user', lazy=True,
                               cascade='all, delete-orphan')
    activity_logs = db.relationship('ActivityLog', backref='user', lazy=True,
                                    cascade='all, delete-orphan')
    suggestions = db.relationship('Suggestion', backref='author', lazy=True,
                                  cascade='all, delete-orphan',
                                  foreign_keys='Suggestion.user_id')

    def __repr__(self):
        return f'<User {self.email}>'

    @property
    def display_name(self):
        return ' '.join(part for part in (self.first_name, self.last_name) if part)

    @property
    def is_admin(self):
        return self.role == 'admin'

    def is_locked(self, now=None):
        """Check whether a lockout window is still running"""
        now = now or utcnow()
        return self.locked_until is not None and self.locked_until > now

    def to_dict(self):
        """Public representation, never includes the hash or live tokens"""
        return {
            'id': self.id,
            'email': self.email,
            'profile': {
                'firstName': self.first_name,
                'lastName': self.last_name,
                'avatar': self.avatar,
                'bio': self.bio,
                'website': self.website,
                'location': self.location,
            },
            'preferences': {
                'theme': self.theme,
                'language': self.language,
                'timezone': self.timezone,
                'emailNotifications': self.email_notifications,
            },
            'role': self.role,
            'isVerified': self.is_verified,
            'usage': {
                'dailyCount': self.daily_count,
                'monthlyCount': self.monthly_count,
                'totalCount': self.total_count,
                'dailyLimit': self.daily_limit,
                'monthlyLimit': self.monthly_limit,
                'lastResetDate': self.last_reset_date.isoformat() if self.last_reset_date else None,
                'lastUsageDate': _iso(self.last_usage_date),
            },
            'status': {
                'isActive': self.is_active,
                'isSuspended': self.is_suspended,
                'suspensionReason': self.suspension_reason,
                'lastLogin': _iso(self.last_login),
                'lastActivity': _iso(self.last_activity),
            },
            'createdAt': _iso(self.created_at),
        }


def _iso(value):
    return value.isoformat() if value else None
