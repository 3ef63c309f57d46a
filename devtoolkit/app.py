# devtoolkit/app.py
"""Application factory for the DevToolkit account service"""
import os
import sys

import click
from dotenv import load_dotenv
from flask import Flask, jsonify
from loguru import logger

from devtoolkit.config import config
from devtoolkit.extensions import db, notifier


def create_app(config_name=None):
    """Create and configure Flask application"""
    load_dotenv()
    config_name = config_name or os.environ.get('FLASK_CONFIG', 'default')

    app = Flask(__name__, template_folder='templates')

    # Load configuration
    app.config.from_object(config[config_name]())

    configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    notifier.init_app(app)

    # Register blueprints
    from devtoolkit.controllers import admin_bp, auth_bp, user_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(user_bp, url_prefix='/api/user')
    app.register_blueprint(admin_bp, url_prefix='/api/admin')

    @app.route('/health')
    def health():
        return jsonify({'status': 'ok'})

    # Register error handlers
    register_error_handlers(app)
    register_cli_commands(app)

    # Create database tables
    with app.app_context():
        import devtoolkit.models  # noqa: F401
        db.create_all()

    logger.info(f"DevToolkit started with '{config_name}' configuration")
    return app


def configure_logging(app):
    """Single stderr sink at LOG_LEVEL"""
    logger.remove()
    logger.add(sys.stderr, level=app.config['LOG_LEVEL'],
               format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}")


def register_error_handlers(app):
    """Register error handlers"""
    @app.errorhandler(400)
    def bad_request(error):
        return jsonify({'success': False, 'message': 'Bad request'}), 400

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'success': False, 'message': 'Not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'success': False, 'message': 'Method not allowed'}), 405

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        logger.error(f"Unhandled error: {error}")
        return jsonify({'success': False, 'message': 'Internal server error'}), 500


def register_cli_commands(app):
    """Register CLI commands."""

    @app.cli.command("init-db")
    def init_db_command():
        """Creates database tables."""
        db.create_all()
        click.echo("Initialized the database.")

    @app.cli.command("create-admin")
    @click.option('--email', default=None, help='Admin email, defaults to ADMIN_EMAIL')
    @click.option('--password', default=None, help='Admin password, defaults to ADMIN_PASSWORD')
    def create_admin_command(email, password):
        """Creates (or promotes) a verified admin account."""
        from devtoolkit.models.user import User
        from devtoolkit.utils.security import hash_password
        from devtoolkit.utils.timeutil import today_in

        email = email or app.config['ADMIN_EMAIL']
        password = password or app.config['ADMIN_PASSWORD']
        if not password or len(password) < app.config['MIN_PASSWORD_LENGTH']:
            raise click.UsageError(
                f"An admin password of at least {app.config['MIN_PASSWORD_LENGTH']} characters is required")

        user = User.query.filter_by(email=email).first()
        if user:
            user.role = 'admin'
            user.is_verified = True
            click.echo(f"Promoted {email} to admin.")
        else:
            user = User(
                email=email,
                password_hash=hash_password(password, rounds=app.config['BCRYPT_ROUNDS']),
                first_name='Admin',
                role='admin',
                is_verified=True,
                daily_limit=app.config['DEFAULT_DAILY_LIMIT'],
                monthly_limit=app.config['DEFAULT_MONTHLY_LIMIT'],
                last_reset_date=today_in(app.config['USAGE_TIMEZONE']),
                source='admin',
            )
            db.session.add(user)
            click.echo(f"Created admin {email}.")
        db.session.commit()

    @app.cli.command("purge-activity")
    @click.option('--days', default=None, type=int, help='Retention window, defaults to ACTIVITY_LOG_RETENTION_DAYS')
    def purge_activity_command(days):
        """Removes old activity entries and expired sessions."""
        from devtoolkit.models.activity_log import ActivityLog
        from devtoolkit.models.user_session import UserSession

        if days is None:
            days = app.config['ACTIVITY_LOG_RETENTION_DAYS']
        logs = ActivityLog.purge_expired(days_to_keep=days)
        sessions = UserSession.purge_expired()
        logger.info(f"Purged {logs} activity entries and {sessions} sessions")
        click.echo(f"Removed {logs} activity entries older than {days} days and {sessions} expired sessions.")
