# devtoolkit/config.py
"""Configuration for the DevToolkit account service
Secure defaults, every value overridable from the environment
"""
import os
import secrets


def _env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """Base configuration"""
    SECRET_KEY = os.environ.get('SECRET_KEY') or secrets.token_hex(32)

    # Database configuration
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///devtoolkit.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = False

    # Bearer tokens
    JWT_SECRET = os.environ.get('JWT_SECRET') or SECRET_KEY
    JWT_ALGORITHM = 'HS256'
    JWT_EXPIRES_DAYS = int(os.environ.get('JWT_EXPIRES_DAYS', '7'))

    # Password policy
    MIN_PASSWORD_LENGTH = 8
    BCRYPT_ROUNDS = 12

    # Login throttling
    MAX_FAILED_LOGINS = 5
    LOCKOUT_MINUTES = 15

    # Single-use token lifetimes
    VERIFICATION_TOKEN_HOURS = 24
    RESET_TOKEN_HOURS = 1
    SESSION_DAYS = 7

    # AI usage quotas
    DEFAULT_DAILY_LIMIT = int(os.environ.get('DEFAULT_DAILY_LIMIT', '50'))
    DEFAULT_MONTHLY_LIMIT = int(os.environ.get('DEFAULT_MONTHLY_LIMIT', '1000'))
    USAGE_TIMEZONE = os.environ.get('USAGE_TIMEZONE', 'UTC')

    # Activity log TTL
    ACTIVITY_LOG_RETENTION_DAYS = int(os.environ.get('ACTIVITY_LOG_RETENTION_DAYS', '90'))

    # Login cookie mirroring the bearer token
    AUTH_COOKIE_NAME = 'token'
    AUTH_COOKIE_SECURE = False

    # Notifications
    BASE_URL = os.environ.get('BASE_URL', 'http://localhost:5000')
    MAIL_TRANSPORT = os.environ.get('MAIL_TRANSPORT', 'console')  # console, smtp, http
    MAIL_FROM = os.environ.get('MAIL_FROM', 'noreply@devtoolkit.com')
    MAIL_TIMEOUT_SECONDS = float(os.environ.get('MAIL_TIMEOUT_SECONDS', '10'))
    MAIL_SYNC = _env_bool('MAIL_SYNC')
    SMTP_HOST = os.environ.get('SMTP_HOST', 'smtp.gmail.com')
    SMTP_PORT = int(os.environ.get('SMTP_PORT', '587'))
    SMTP_USER = os.environ.get('SMTP_USER')
    SMTP_PASSWORD = os.environ.get('SMTP_PASSWORD')
    MAIL_API_URL = os.environ.get('MAIL_API_URL')
    MAIL_API_KEY = os.environ.get('MAIL_API_KEY')

    # Bootstrap admin for `flask create-admin`
    ADMIN_EMAIL = os.environ.get('ADMIN_EMAIL', 'admin@devtoolkit.com')
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD')

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    TESTING = False
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')


class ProductionConfig(Config):
    """Production configuration with enhanced security"""
    DEBUG = False
    TESTING = False
    AUTH_COOKIE_SECURE = True

    @property
    def SECRET_KEY(self):
        return os.environ['SECRET_KEY']  # Will raise if not set

    @property
    def JWT_SECRET(self):
        return os.environ.get('JWT_SECRET') or os.environ['SECRET_KEY']

    @property
    def SQLALCHEMY_DATABASE_URI(self):
        return os.environ['DATABASE_URL']


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    DEBUG = True

    # Use in-memory database for tests
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SECRET_KEY = 'testing-secret'
    JWT_SECRET = 'testing-jwt-secret'

    # Faster hashing for tests
    BCRYPT_ROUNDS = 4

    MAIL_TRANSPORT = 'console'
    MAIL_SYNC = True
    LOG_LEVEL = 'WARNING'


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
