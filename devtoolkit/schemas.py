# devtoolkit/schemas.py
"""Explicit update payloads

Only the fields named here can be changed through a profile update. Sensitive
account fields are not representable at all.
"""
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

PROTECTED_KEYS = frozenset({
    'password', 'passwordHash', 'password_hash', 'role', 'email', 'authentication',
    'usage', 'status', 'metadata', 'id', '_id',
})

THEMES = ('light', 'dark', 'system')

# payload key -> (section, column)
_PROFILE_KEYS = {
    'firstName': 'first_name',
    'lastName': 'last_name',
    'avatar': 'avatar',
    'bio': 'bio',
    'website': 'website',
    'location': 'location',
}
_PREFERENCE_KEYS = {
    'theme': 'theme',
    'language': 'language',
    'timezone': 'timezone',
    'emailNotifications': 'email_notifications',
}
_MAX_LENGTHS = {
    'first_name': 100, 'last_name': 100, 'avatar': 512, 'bio': 2000,
    'website': 255, 'location': 120, 'language': 10, 'timezone': 64,
}


class PatchError(ValueError):
    """Raised when an update payload cannot be applied"""


@dataclass
class UserPatch:
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar: Optional[str] = None
    bio: Optional[str] = None
    website: Optional[str] = None
    location: Optional[str] = None
    theme: Optional[str] = None
    language: Optional[str] = None
    timezone: Optional[str] = None
    email_notifications: Optional[bool] = None

    def changes(self) -> Dict[str, Any]:
        """Fields that were set, by column name"""
        return {f.name: getattr(self, f.name) for f in fields(self)
                if getattr(self, f.name) is not None}

    def is_empty(self) -> bool:
        return not self.changes()

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> 'UserPatch':
        """
        Build a patch from a JSON body shaped like the public user document:
        {"profile": {...}, "preferences": {...}}

        Raises:
            PatchError: protected, unknown or invalid fields
        """
        if not isinstance(payload, dict):
            raise PatchError('Request body must be a JSON object')

        protected = sorted(PROTECTED_KEYS.intersection(payload))
        if protected:
            raise PatchError(f"Cannot update protected fields: {', '.join(protected)}")

        unknown = sorted(set(payload) - {'profile', 'preferences'})
        if unknown:
            raise PatchError(f"Unknown fields: {', '.join(unknown)}")

        values = {}
        for section, mapping in (('profile', _PROFILE_KEYS), ('preferences', _PREFERENCE_KEYS)):
            block = payload.get(section) or {}
            if not isinstance(block, dict):
                raise PatchError(f'{section} must be an object')
            unknown = sorted(set(block) - set(mapping))
            if unknown:
                raise PatchError(f"Unknown {section} fields: {', '.join(unknown)}")
            for key, column in mapping.items():
                if key in block:
                    values[column] = block[key]

        patch = cls(**values)
        patch.validate()
        return patch

    def validate(self):
        for column, value in self.changes().items():
            if column == 'email_notifications':
                if not isinstance(value, bool):
                    raise PatchError('emailNotifications must be a boolean')
                continue
            if not isinstance(value, str):
                raise PatchError(f'{column} must be a string')
            if len(value) > _MAX_LENGTHS.get(column, 255):
                raise PatchError(f'{column} is too long')
        if self.theme is not None and self.theme not in THEMES:
            raise PatchError(f"theme must be one of: {', '.join(THEMES)}")
