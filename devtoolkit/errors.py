# devtoolkit/errors.py
"""Result and error types shared by the service layer

Expected failures travel back to the route layer as ServiceResult values.
Exceptions are reserved for infrastructure faults.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(Enum):
    VALIDATION = 'validation'
    INVALID_TOKEN = 'invalid_token'
    ACCOUNT_STATE = 'account_state'
    CREDENTIALS = 'credentials'
    QUOTA_EXCEEDED = 'quota_exceeded'
    NOT_FOUND = 'not_found'


HTTP_STATUS = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.INVALID_TOKEN: 400,
    ErrorKind.ACCOUNT_STATE: 403,
    ErrorKind.CREDENTIALS: 401,
    ErrorKind.QUOTA_EXCEEDED: 429,
    ErrorKind.NOT_FOUND: 404,
}


@dataclass
class ServiceResult:
    """Outcome of a service operation"""
    success: bool
    message: str
    error: Optional[ErrorKind] = None
    user: Any = None
    token: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, message: str, **kwargs) -> 'ServiceResult':
        return cls(success=True, message=message, **kwargs)

    @classmethod
    def fail(cls, kind: ErrorKind, message: str) -> 'ServiceResult':
        return cls(success=False, message=message, error=kind)

    @property
    def http_status(self) -> int:
        if self.success:
            return 200
        return HTTP_STATUS.get(self.error, 400)

    def to_dict(self) -> Dict[str, Any]:
        payload = {'success': self.success, 'message': self.message}
        if self.token:
            payload['token'] = self.token
        if self.user is not None:
            payload['user'] = self.user.to_dict()
        payload.update(self.data)
        return payload

    def __bool__(self):
        return self.success


class NotificationDeliveryError(Exception):
    """Raised by a mail transport when a message could not be handed off"""

    def __init__(self, to_address, reason):
        super().__init__(f'Delivery to {to_address} failed: {reason}')
        self.to_address = to_address
        self.reason = reason
