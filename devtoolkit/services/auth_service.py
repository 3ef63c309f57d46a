# devtoolkit/services/auth_service.py
"""Authentication service for the DevToolkit account service
Registration, login with lockout, email verification and password reset
"""
from datetime import timedelta
from typing import List, Optional

from flask import current_app
from loguru import logger
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from devtoolkit.errors import ErrorKind, ServiceResult
from devtoolkit.extensions import db, notifier
from devtoolkit.models.user import User
from devtoolkit.models.user_session import UserSession
from devtoolkit.schemas import UserPatch
from devtoolkit.services import session_service
from devtoolkit.services.activity_service import log_activity
from devtoolkit.services.token_codec import TokenCodec
from devtoolkit.utils.device import DeviceInfo
from devtoolkit.utils.security import generate_secure_token, hash_password, is_valid_email, verify_password
from devtoolkit.utils.timeutil import today_in, utcnow

INVALID_CREDENTIALS = 'Invalid credentials'
RESET_REQUESTED = 'If an account with that email exists, a password reset link has been sent.'


class AuthService:
    """Handles authentication operations"""

    log_activity = staticmethod(log_activity)

    @staticmethod
    def _config(key):
        return current_app.config[key]

    @staticmethod
    def _hash(password):
        return hash_password(password, rounds=current_app.config['BCRYPT_ROUNDS'])

    @staticmethod
    def _password_error(password):
        min_length = current_app.config['MIN_PASSWORD_LENGTH']
        if not isinstance(password, str) or len(password) < min_length:
            return f'Password must be at least {min_length} characters long'
        return None

    @staticmethod
    def register(email: str, password: str, display_name: str = '',
                 device_info: Optional[DeviceInfo] = None) -> ServiceResult:
        """CREATE: account in PendingVerification state with a 24h verification token"""
        email = email if isinstance(email, str) else ''
        # Exact match as stored, no case folding
        if User.query.filter_by(email=email).first():
            return ServiceResult.fail(ErrorKind.VALIDATION, 'User already exists')

        if not is_valid_email(email):
            return ServiceResult.fail(ErrorKind.VALIDATION, 'Invalid email format')

        error = AuthService._password_error(password)
        if error:
            return ServiceResult.fail(ErrorKind.VALIDATION, error)

        name_parts = display_name.split() if isinstance(display_name, str) else []
        first_name = name_parts[0] if name_parts else None
        last_name = ' '.join(name_parts[1:]) or None

        now = utcnow()
        verification_hours = AuthService._config('VERIFICATION_TOKEN_HOURS')
        verification_token = generate_secure_token()

        user = User(
            email=email,
            password_hash=AuthService._hash(password),
            first_name=first_name,
            last_name=last_name,
            is_verified=False,
            verification_token=verification_token,
            verification_token_expiry=now + timedelta(hours=verification_hours),
            failed_login_attempts=0,
            role='user',
            daily_limit=AuthService._config('DEFAULT_DAILY_LIMIT'),
            monthly_limit=AuthService._config('DEFAULT_MONTHLY_LIMIT'),
            last_reset_date=today_in(AuthService._config('USAGE_TIMEZONE')),
            is_active=True,
            is_suspended=False,
            created_at=now,
            updated_at=now,
            source='web',
        )
        if device_info:
            user.ip_address = (device_info.ip_address or '')[:45]
            user.user_agent = (device_info.user_agent or '')[:256]

        try:
            db.session.add(user)
            db.session.commit()
        except IntegrityError:
            # Lost a race against a concurrent registration for the same email
            db.session.rollback()
            return ServiceResult.fail(ErrorKind.VALIDATION, 'User already exists')

        notifier.send(email, 'verification', {
            'token': verification_token,
            'expires_hours': verification_hours,
        })

        log_activity(user.id, 'user_registered', 'auth',
                     {'description': 'User registered successfully'}, 'success')
        logger.info(f"User registered: {email}")

        return ServiceResult.ok('Registration successful. Please check your email for verification.',
                                user=user)

    @staticmethod
    def login(email: str, password: str, device_info: Optional[DeviceInfo] = None) -> ServiceResult:
        """READ: authenticate, short-circuiting on the first failed check"""
        if not isinstance(email, str) or not isinstance(password, str):
            return ServiceResult.fail(ErrorKind.VALIDATION, 'Email and password are required')

        user = User.query.filter_by(email=email).first()
        if not user:
            logger.info("Login failed: unknown account")
            return ServiceResult.fail(ErrorKind.CREDENTIALS, INVALID_CREDENTIALS)

        if not user.is_active or user.is_suspended:
            logger.warning(f"Login refused for suspended account {user.id}")
            return ServiceResult.fail(ErrorKind.ACCOUNT_STATE, 'Account is suspended')

        now = utcnow()
        if user.is_locked(now):
            logger.warning(f"Login refused for locked account {user.id}")
            return ServiceResult.fail(ErrorKind.ACCOUNT_STATE,
                                      'Account is temporarily locked. Please try again later.')

        if not verify_password(password, user.password_hash):
            AuthService._record_failed_login(user.id, now)
            log_activity(user.id, 'login_failed', 'auth',
                         {'description': 'Failed login attempt'}, 'failure')
            return ServiceResult.fail(ErrorKind.CREDENTIALS, INVALID_CREDENTIALS)

        if not user.is_verified:
            return ServiceResult.fail(ErrorKind.ACCOUNT_STATE, 'Please verify your email before logging in')

        db.session.execute(
            update(User)
            .where(User.id == user.id)
            .values(failed_login_attempts=0, locked_until=None,
                    last_login=now, last_activity=now, updated_at=now)
        )
        db.session.commit()

        token = TokenCodec.from_app().issue(user)

        if device_info:
            session_service.create_session(user.id, device_info, token)

        log_activity(user.id, 'user_login', 'auth',
                     {'description': 'User logged in successfully'}, 'success')
        logger.info(f"User logged in: {user.id}")

        return ServiceResult.ok('Login successful', token=token, user=user)

    @staticmethod
    def _record_failed_login(user_id, now):
        """Atomic increment, then lock once the threshold is reached"""
        max_attempts = AuthService._config('MAX_FAILED_LOGINS')
        lockout = timedelta(minutes=AuthService._config('LOCKOUT_MINUTES'))

        db.session.execute(
            update(User)
            .where(User.id == user_id)
            .values(failed_login_attempts=User.failed_login_attempts + 1, updated_at=now)
        )
        locked = db.session.execute(
            update(User)
            .where(User.id == user_id, User.failed_login_attempts >= max_attempts)
            .values(locked_until=now + lockout)
        )
        db.session.commit()
        if locked.rowcount:
            logger.warning(f"Account {user_id} locked for {lockout} after repeated failures")

    @staticmethod
    def verify_email(token: str) -> ServiceResult:
        """Consume a verification token (single use)"""
        invalid = ServiceResult.fail(ErrorKind.INVALID_TOKEN, 'Invalid or expired verification token')
        if not token or not isinstance(token, str):
            return invalid

        now = utcnow()
        user = User.query.filter(
            User.verification_token == token,
            User.verification_token_expiry > now,
        ).first()
        if not user:
            return invalid

        consumed = db.session.execute(
            update(User)
            .where(User.id == user.id, User.verification_token == token)
            .values(is_verified=True, verification_token=None,
                    verification_token_expiry=None, updated_at=now)
        )
        db.session.commit()
        if not consumed.rowcount:
            return invalid

        log_activity(user.id, 'email_verified', 'auth',
                     {'description': 'Email verified successfully'}, 'success')

        notifier.send(user.email, 'welcome', {
            'first_name': user.first_name,
            'daily_limit': user.daily_limit,
        })

        return ServiceResult.ok('Email verified successfully', user=user)

    @staticmethod
    def request_password_reset(email: str) -> ServiceResult:
        """Issue a one-hour reset token; the response never reveals whether the account exists"""
        user = User.query.filter_by(email=email).first() if isinstance(email, str) else None
        if not user:
            return ServiceResult.ok(RESET_REQUESTED)

        now = utcnow()
        reset_hours = AuthService._config('RESET_TOKEN_HOURS')
        reset_token = generate_secure_token()

        # Overwrites any unconsumed token
        db.session.execute(
            update(User)
            .where(User.id == user.id)
            .values(reset_token=reset_token,
                    reset_token_expiry=now + timedelta(hours=reset_hours),
                    updated_at=now)
        )
        db.session.commit()

        notifier.send(user.email, 'password_reset', {
            'token': reset_token,
            'expires_hours': reset_hours,
        })

        log_activity(user.id, 'password_reset_requested', 'auth',
                     {'description': 'Password reset requested'}, 'success')

        return ServiceResult.ok(RESET_REQUESTED)

    @staticmethod
    def reset_password(token: str, new_password: str) -> ServiceResult:
        """UPDATE: replace the password with a single-use reset token"""
        invalid = ServiceResult.fail(ErrorKind.INVALID_TOKEN, 'Invalid or expired reset token')
        if not token or not isinstance(token, str):
            return invalid

        now = utcnow()
        user = User.query.filter(
            User.reset_token == token,
            User.reset_token_expiry > now,
        ).first()
        if not user:
            return invalid

        error = AuthService._password_error(new_password)
        if error:
            return ServiceResult.fail(ErrorKind.VALIDATION, error)

        consumed = db.session.execute(
            update(User)
            .where(User.id == user.id, User.reset_token == token)
            .values(password_hash=AuthService._hash(new_password),
                    reset_token=None, reset_token_expiry=None,
                    last_password_change=now, updated_at=now)
        )
        db.session.commit()
        if not consumed.rowcount:
            return invalid

        log_activity(user.id, 'password_reset', 'auth',
                     {'description': 'Password reset successfully'}, 'success')

        return ServiceResult.ok('Password reset successfully')

    @staticmethod
    def change_password(user_id, current_password: str, new_password: str) -> ServiceResult:
        """UPDATE: password change by a signed-in user"""
        user = AuthService.get_user_by_id(user_id)
        if not user:
            return ServiceResult.fail(ErrorKind.NOT_FOUND, 'User not found')

        if not verify_password(current_password, user.password_hash):
            return ServiceResult.fail(ErrorKind.CREDENTIALS, 'Current password is incorrect')

        error = AuthService._password_error(new_password)
        if error:
            return ServiceResult.fail(ErrorKind.VALIDATION, error)

        if verify_password(new_password, user.password_hash):
            return ServiceResult.fail(ErrorKind.VALIDATION,
                                      'New password cannot be the same as current password')

        now = utcnow()
        db.session.execute(
            update(User)
            .where(User.id == user.id)
            .values(password_hash=AuthService._hash(new_password),
                    last_password_change=now, updated_at=now)
        )
        db.session.commit()

        log_activity(user.id, 'password_changed', 'profile',
                     {'description': 'Password changed'}, 'success')

        return ServiceResult.ok('Password updated successfully')

    @staticmethod
    def logout(token: str) -> bool:
        """Close the device session opened with this token"""
        claims = TokenCodec.from_app().verify(token)
        if not claims:
            return False
        closed = session_service.deactivate_session(token)
        user = AuthService.get_user_by_id(claims.user_id)
        if user:
            log_activity(user.id, 'user_logout', 'auth',
                         {'description': 'User logged out'}, 'success')
        return closed

    @staticmethod
    def get_user_by_id(user_id) -> Optional[User]:
        try:
            return db.session.get(User, int(user_id))
        except (TypeError, ValueError):
            return None

    @staticmethod
    def update_user(user_id, patch: UserPatch) -> bool:
        """Apply an explicit profile/preferences patch"""
        changes = patch.changes()
        if not changes:
            return False

        user = AuthService.get_user_by_id(user_id)
        if not user:
            return False

        result = db.session.execute(
            update(User)
            .where(User.id == user.id)
            .values(updated_at=utcnow(), **changes)
        )
        db.session.commit()

        log_activity(user.id, 'profile_updated', 'profile',
                     {'description': 'Profile updated', 'metadata': {'fields': sorted(changes)}},
                     'success')
        return result.rowcount > 0

    @staticmethod
    def list_sessions(user_id) -> List[UserSession]:
        user = AuthService.get_user_by_id(user_id)
        if not user:
            return []
        return session_service.active_sessions(user.id)
