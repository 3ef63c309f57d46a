"""Test configuration loading"""
import pytest

from devtoolkit.app import create_app
from devtoolkit.config import DevelopmentConfig, ProductionConfig, config


def test_development_config():
    """Verify development configuration loads correctly"""
    settings = config['development']()
    assert settings.DEBUG is True
    assert settings.BCRYPT_ROUNDS == 12
    assert settings.AUTH_COOKIE_SECURE is False
    assert isinstance(settings, DevelopmentConfig)


def test_default_is_development():
    assert config['default'] is DevelopmentConfig


def test_testing_app():
    app = create_app('testing')
    assert app.config['TESTING'] is True
    assert app.config['SQLALCHEMY_DATABASE_URI'] == 'sqlite:///:memory:'
    assert app.config['MAIL_SYNC'] is True
    assert app.config['JWT_EXPIRES_DAYS'] == 7
    assert app.config['MAX_FAILED_LOGINS'] == 5
    assert app.config['LOCKOUT_MINUTES'] == 15
    assert 'SECRET_KEY' in app.config


def test_production_reads_secrets_from_environment(monkeypatch):
    monkeypatch.setenv('SECRET_KEY', 'prod-secret')
    monkeypatch.setenv('DATABASE_URL', 'postgresql://db/devtoolkit')
    monkeypatch.delenv('JWT_SECRET', raising=False)

    settings = ProductionConfig()
    assert settings.DEBUG is False
    assert settings.AUTH_COOKIE_SECURE is True
    assert settings.SECRET_KEY == 'prod-secret'
    assert settings.JWT_SECRET == 'prod-secret'
    assert settings.SQLALCHEMY_DATABASE_URI == 'postgresql://db/devtoolkit'


def test_production_requires_secret_key(monkeypatch):
    monkeypatch.delenv('SECRET_KEY', raising=False)
    with pytest.raises(KeyError):
        ProductionConfig().SECRET_KEY
