"""Email rendering, transports and the best-effort dispatcher"""
from types import SimpleNamespace

import pytest
import requests

from devtoolkit.errors import NotificationDeliveryError
from devtoolkit.extensions import notifier
from devtoolkit.services.notification_service import (ConsoleTransport, HTTPMailTransport, OutboundEmail,
                                                      SMTPTransport, build_transport)


def _message():
    return OutboundEmail(to_address='a@b.com', subject='Hi', html='<p>Hi</p>', kind='welcome')


def test_render_verification_link(ctx):
    message = notifier.render('a@b.com', 'verification', {'token': 'abc123', 'expires_hours': 24})
    assert message.subject == 'Verify Your DevToolkit Account'
    assert 'http://localhost:5000/auth/verify-email?token=abc123' in message.html
    assert message.kind == 'verification'


def test_render_admin_response_subject(ctx):
    message = notifier.render('a@b.com', 'admin_response',
                              {'suggestion_title': 'Dark mode', 'admin_response': 'Done'})
    assert message.subject == 'Response to your suggestion: Dark mode'
    assert 'Done' in message.html


def test_render_unknown_kind(ctx):
    with pytest.raises(ValueError):
        notifier.render('a@b.com', 'newsletter', {})


def test_send_delivers_inline_when_synchronous(ctx, outbox):
    assert notifier.send('a@b.com', 'welcome', {'first_name': 'Ann', 'daily_limit': 50}) is None
    assert outbox.kinds() == ['welcome']
    assert 'Ann' in outbox.sent[0].html


def test_send_swallows_delivery_errors(ctx, failing_mail):
    notifier.send('a@b.com', 'password_reset', {'token': 't', 'expires_hours': 1})
    assert failing_mail.attempts == 1


def test_send_swallows_render_errors(ctx, outbox):
    assert notifier.send('a@b.com', 'admin_response', {}) is None
    assert outbox.sent == []


def test_send_ignores_unknown_kind(ctx, outbox):
    assert notifier.send('a@b.com', 'newsletter', {}) is None
    assert outbox.sent == []


def test_background_send_returns_future(ctx, outbox):
    notifier.synchronous = False
    future = notifier.send('a@b.com', 'welcome', {'first_name': 'Ann', 'daily_limit': 50})
    assert future.result(timeout=5) is True
    assert outbox.kinds() == ['welcome']


def test_http_transport_wraps_request_errors(monkeypatch):
    def boom(*args, **kwargs):
        raise requests.exceptions.ConnectionError('unreachable')

    monkeypatch.setattr(requests, 'post', boom)
    transport = HTTPMailTransport('https://mail.invalid/v1/email', 'key', 'noreply@devtoolkit.com')
    with pytest.raises(NotificationDeliveryError, match='unreachable'):
        transport.deliver(_message())


def test_http_transport_rejects_error_status(monkeypatch):
    captured = {}

    def fake_post(url, json, headers, timeout):
        captured.update(url=url, json=json, timeout=timeout)
        return SimpleNamespace(ok=False, status_code=500, text='server error')

    monkeypatch.setattr(requests, 'post', fake_post)
    transport = HTTPMailTransport('https://mail.invalid/v1/email', 'key', 'noreply@devtoolkit.com', timeout=3)
    with pytest.raises(NotificationDeliveryError, match='HTTP 500'):
        transport.deliver(_message())
    assert captured['timeout'] == 3
    assert captured['json']['to'] == [{'email_address': {'address': 'a@b.com'}}]


def test_build_transport():
    base = {'MAIL_FROM': 'noreply@devtoolkit.com', 'MAIL_TIMEOUT_SECONDS': 5.0}
    assert isinstance(build_transport(dict(base, MAIL_TRANSPORT='console')), ConsoleTransport)
    smtp = build_transport(dict(base, MAIL_TRANSPORT='smtp', SMTP_HOST='smtp.test', SMTP_PORT=587))
    assert isinstance(smtp, SMTPTransport)
    assert smtp.timeout == 5.0
    http = build_transport(dict(base, MAIL_TRANSPORT='http', MAIL_API_URL='https://mail.invalid'))
    assert isinstance(http, HTTPMailTransport)
    with pytest.raises(ValueError):
        build_transport(dict(base, MAIL_TRANSPORT='pigeon'))
