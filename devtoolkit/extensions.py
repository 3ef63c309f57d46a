# devtoolkit/extensions.py
"""Flask extensions initialization"""
from flask_sqlalchemy import SQLAlchemy

from devtoolkit.services.notification_service import NotificationDispatcher

# Initialize SQLAlchemy
db = SQLAlchemy()

# Outbound mail, bound to the app in create_app
notifier = NotificationDispatcher()
