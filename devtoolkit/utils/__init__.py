# devtoolkit/utils/__init__.py
"""Utility functions and decorators"""
from .security import hash_password, verify_password
from .decorators import token_required, admin_required

__all__ = ['hash_password', 'verify_password', 'token_required', 'admin_required']
