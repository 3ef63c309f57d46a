# devtoolkit/utils/device.py
"""User-agent fingerprinting for session records"""
import re
from dataclasses import dataclass
from typing import Optional

_TABLET = re.compile(r'tablet|ipad', re.IGNORECASE)
_MOBILE = re.compile(r'mobile|android|iphone', re.IGNORECASE)

# Order matters: Edge and Chrome both advertise "Chrome", Chrome advertises "Safari"
_BROWSERS = (('Edg', 'Edge'), ('Chrome', 'Chrome'), ('Firefox', 'Firefox'), ('Safari', 'Safari'))
_SYSTEMS = (('Windows', 'Windows'), ('Android', 'Android'), ('iPhone', 'iOS'), ('iPad', 'iOS'),
            ('Mac', 'macOS'), ('Linux', 'Linux'))


@dataclass
class DeviceInfo:
    """Client details captured by the route layer"""
    user_agent: str = ''
    ip_address: str = ''
    location: Optional[str] = None

    @classmethod
    def from_request(cls, request):
        forwarded = request.headers.get('X-Forwarded-For', '')
        ip_address = (forwarded.split(',')[0].strip() or
                      request.headers.get('X-Real-IP') or
                      request.remote_addr or 'unknown')
        return cls(user_agent=request.headers.get('User-Agent', ''), ip_address=ip_address)


def detect_device_type(user_agent: str) -> str:
    if _TABLET.search(user_agent or ''):
        return 'tablet'
    if _MOBILE.search(user_agent or ''):
        return 'mobile'
    return 'desktop'


def detect_browser(user_agent: str) -> str:
    for marker, name in _BROWSERS:
        if marker in (user_agent or ''):
            return name
    return 'Unknown'


def detect_os(user_agent: str) -> str:
    for marker, name in _SYSTEMS:
        if marker in (user_agent or ''):
            return name
    return 'Unknown'
