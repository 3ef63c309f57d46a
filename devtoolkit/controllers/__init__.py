# devtoolkit/controllers/__init__.py
"""JSON controllers for the account, usage and admin API"""
from .auth_controller import auth_bp
from .user_controller import user_bp
from .admin_controller import admin_bp

__all__ = ['auth_bp', 'user_bp', 'admin_bp']
