# devtoolkit/models/__init__.py
"""Database models for the DevToolkit account service"""
from .user import User
from .user_session import UserSession
from .activity_log import ActivityLog
from .suggestion import Suggestion, SuggestionVote

__all__ = ['User', 'UserSession', 'ActivityLog', 'Suggestion', 'SuggestionVote']
