# devtoolkit/services/token_codec.py
"""
Bearer token signing and verification.

Stateless JWT pair: issue() signs the identity claims, verify() returns the
decoded claims or None.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from flask import current_app
from loguru import logger


@dataclass
class TokenClaims:
    """
    Decoded bearer token.

    Attributes:
        user_id: Account id as a string
        email: Account email at issue time
        role: Authorization tier (user, admin, moderator)
        issued_at: iat claim
        expires_at: exp claim
    """
    user_id: str
    email: str
    role: str
    issued_at: datetime
    expires_at: datetime

    @property
    def is_admin(self) -> bool:
        return self.role == 'admin'


class TokenCodec:
    """
    JWT codec.

    Expired, malformed and badly signed tokens all come back as None.
    The reason goes to the server log only.
    """

    def __init__(self, secret_key: str, algorithm: str = 'HS256', expires_days: int = 7):
        """
        Initialize codec.

        Args:
            secret_key: Server-held signing secret
            algorithm: JWT algorithm (default: HS256)
            expires_days: Token lifetime in days
        """
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.lifetime = timedelta(days=expires_days)

    @classmethod
    def from_app(cls, app=None) -> 'TokenCodec':
        app = app or current_app
        return cls(
            secret_key=app.config['JWT_SECRET'],
            algorithm=app.config.get('JWT_ALGORITHM', 'HS256'),
            expires_days=app.config.get('JWT_EXPIRES_DAYS', 7),
        )

    def issue(self, user, now: Optional[datetime] = None) -> str:
        """
        Create a signed token for a user.

        Args:
            user: Any object with id, email and role attributes
            now: Issue time (defaults to the current time)

        Returns:
            JWT token string
        """
        issued = now or datetime.now(timezone.utc)
        payload = {
            'userId': str(user.id),
            'email': user.email,
            'role': user.role,
            'iat': int(issued.timestamp()),
            'exp': int((issued + self.lifetime).timestamp()),
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: Optional[str]) -> Optional[TokenClaims]:
        """
        Verify and decode a token.

        Args:
            token: JWT token string

        Returns:
            TokenClaims if valid, None otherwise
        """
        if not token:
            return None
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={'require': ['exp', 'iat']},
            )
            return TokenClaims(
                user_id=str(payload['userId']),
                email=payload['email'],
                role=payload['role'],
                issued_at=datetime.fromtimestamp(payload['iat'], tz=timezone.utc),
                expires_at=datetime.fromtimestamp(payload['exp'], tz=timezone.utc),
            )
        except jwt.ExpiredSignatureError:
            logger.info("Rejected bearer token: expired")
        except jwt.InvalidSignatureError:
            logger.warning("Rejected bearer token: bad signature")
        except jwt.InvalidTokenError as e:
            logger.warning(f"Rejected bearer token: {e}")
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Rejected bearer token: malformed claims ({e})")
        return None
