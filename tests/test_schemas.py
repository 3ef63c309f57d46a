"""Profile update payload parsing"""
import pytest

from devtoolkit.schemas import PatchError, UserPatch


def test_profile_and_preferences_are_mapped():
    patch = UserPatch.from_payload({
        'profile': {'firstName': 'Ann', 'bio': 'Builds tools'},
        'preferences': {'theme': 'dark', 'emailNotifications': False},
    })
    assert patch.changes() == {
        'first_name': 'Ann',
        'bio': 'Builds tools',
        'theme': 'dark',
        'email_notifications': False,
    }


@pytest.mark.parametrize('key', ['password', 'role', 'email', 'authentication', 'usage', 'status'])
def test_sensitive_fields_are_rejected(key):
    with pytest.raises(PatchError, match='Cannot update protected fields'):
        UserPatch.from_payload({key: 'x', 'profile': {'firstName': 'Ann'}})


def test_unknown_top_level_key():
    with pytest.raises(PatchError, match='Unknown fields: nickname'):
        UserPatch.from_payload({'nickname': 'annie'})


def test_unknown_nested_key():
    with pytest.raises(PatchError, match='Unknown profile fields: role'):
        UserPatch.from_payload({'profile': {'role': 'admin'}})


def test_invalid_theme():
    with pytest.raises(PatchError, match='theme must be one of'):
        UserPatch.from_payload({'preferences': {'theme': 'neon'}})


def test_type_checks():
    with pytest.raises(PatchError):
        UserPatch.from_payload({'preferences': {'emailNotifications': 'yes'}})
    with pytest.raises(PatchError):
        UserPatch.from_payload({'profile': {'firstName': 42}})


def test_length_limit():
    with pytest.raises(PatchError, match='too long'):
        UserPatch.from_payload({'profile': {'firstName': 'x' * 101}})


def test_non_object_body():
    with pytest.raises(PatchError):
        UserPatch.from_payload(None)
    with pytest.raises(PatchError):
        UserPatch.from_payload({'profile': 'Ann'})


def test_empty_patch():
    assert UserPatch.from_payload({}).is_empty()
    assert UserPatch.from_payload({'profile': {}}).is_empty()
