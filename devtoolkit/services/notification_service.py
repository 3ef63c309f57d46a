# devtoolkit/services/notification_service.py
"""Notification dispatcher for the DevToolkit account service
Renders account emails and hands them to a mail transport off the request path
"""
import smtplib
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Dict, Optional

import requests
from flask import render_template
from jinja2 import TemplateError
from loguru import logger

from devtoolkit.errors import NotificationDeliveryError

# template kind -> (subject format, template path)
TEMPLATES = {
    'verification': ('Verify Your DevToolkit Account', 'email/verification.html'),
    'password_reset': ('Reset Your DevToolkit Password', 'email/password_reset.html'),
    'admin_response': ('Response to your suggestion: {suggestion_title}', 'email/admin_response.html'),
    'welcome': ('Welcome to DevToolkit - Your AI-Enhanced Developer Journey Begins!', 'email/welcome.html'),
}


@dataclass
class OutboundEmail:
    to_address: str
    subject: str
    html: str
    kind: str


class ConsoleTransport:
    """Writes messages to the log instead of sending them (development)"""

    def deliver(self, message: OutboundEmail) -> None:
        logger.info(f"[mail:{message.kind}] to={message.to_address} subject={message.subject!r}")
        logger.debug(message.html)


class SMTPTransport:
    """Plain SMTP with STARTTLS"""

    def __init__(self, host, port, sender, user=None, password=None, timeout=10.0):
        self.host = host
        self.port = port
        self.sender = sender
        self.user = user
        self.password = password
        self.timeout = timeout

    def deliver(self, message: OutboundEmail) -> None:
        mail = EmailMessage()
        mail['From'] = self.sender
        mail['To'] = message.to_address
        mail['Subject'] = message.subject
        mail.set_content('This message requires an HTML capable mail client.')
        mail.add_alternative(message.html, subtype='html')
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                smtp.starttls()
                if self.user:
                    smtp.login(self.user, self.password or '')
                smtp.send_message(mail)
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationDeliveryError(message.to_address, str(e)) from e


class HTTPMailTransport:
    """JSON mail API (ZeptoMail-compatible payload)"""

    def __init__(self, api_url, api_key, sender, timeout=10.0):
        self.api_url = api_url
        self.api_key = api_key
        self.sender = sender
        self.timeout = timeout

    def deliver(self, message: OutboundEmail) -> None:
        payload = {
            'from': {'address': self.sender},
            'to': [{'email_address': {'address': message.to_address}}],
            'subject': message.subject,
            'htmlbody': message.html,
        }
        headers = {
            'accept': 'application/json',
            'content-type': 'application/json',
            'authorization': self.api_key or '',
        }
        try:
            response = requests.post(self.api_url, json=payload, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise NotificationDeliveryError(message.to_address, str(e)) from e
        if not response.ok:
            raise NotificationDeliveryError(message.to_address, f'HTTP {response.status_code}: {response.text[:200]}')


def build_transport(config):
    """Pick the transport named by MAIL_TRANSPORT"""
    kind = (config.get('MAIL_TRANSPORT') or 'console').lower()
    timeout = config.get('MAIL_TIMEOUT_SECONDS', 10.0)
    if kind == 'smtp':
        return SMTPTransport(
            host=config['SMTP_HOST'],
            port=config['SMTP_PORT'],
            sender=config['MAIL_FROM'],
            user=config.get('SMTP_USER'),
            password=config.get('SMTP_PASSWORD'),
            timeout=timeout,
        )
    if kind == 'http':
        return HTTPMailTransport(
            api_url=config['MAIL_API_URL'],
            api_key=config.get('MAIL_API_KEY'),
            sender=config['MAIL_FROM'],
            timeout=timeout,
        )
    if kind == 'console':
        return ConsoleTransport()
    raise ValueError(f'Unknown MAIL_TRANSPORT: {kind}')


class NotificationDispatcher:
    """
    Best-effort email sender

    send() never raises for delivery problems: failures are logged and
    reported through the returned future's result (False).
    """

    def __init__(self, app=None):
        self.transport = ConsoleTransport()
        self.synchronous = False
        self.base_url = ''
        self._executor = None
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        self.transport = build_transport(app.config)
        self.synchronous = bool(app.config.get('MAIL_SYNC'))
        self.base_url = app.config.get('BASE_URL', '').rstrip('/')
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix='mail')
        app.extensions['notifier'] = self

    def render(self, to_address: str, template_kind: str, template_data: Dict) -> OutboundEmail:
        """Render subject and body for a template kind (requires an app context)"""
        if template_kind not in TEMPLATES:
            raise ValueError(f'Unknown template kind: {template_kind}')
        subject_format, template_path = TEMPLATES[template_kind]
        context = dict(template_data, base_url=self.base_url)
        subject = subject_format.format(**context)
        html = render_template(template_path, **context)
        return OutboundEmail(to_address=to_address, subject=subject, html=html, kind=template_kind)

    def send(self, to_address: str, template_kind: str, template_data: Dict) -> Optional[Future]:
        """
        Queue an email

        Args:
            to_address: Recipient
            template_kind: verification, password_reset, admin_response or welcome
            template_data: Values for the template

        Returns:
            Future resolving to True/False, or None when sent inline or not rendered
        """
        try:
            message = self.render(to_address, template_kind, template_data)
        except (TemplateError, KeyError, ValueError) as e:
            logger.error(f"Could not render {template_kind} email for {to_address}: {e}")
            return None

        if self.synchronous or self._executor is None:
            self._deliver(message)
            return None
        return self._executor.submit(self._deliver, message)

    def _deliver(self, message: OutboundEmail) -> bool:
        try:
            self.transport.deliver(message)
            logger.info(f"{message.kind} email sent to {message.to_address}")
            return True
        except NotificationDeliveryError as e:
            logger.warning(f"Failed to send {message.kind} email: {e}")
        except Exception:
            logger.exception(f"Unexpected error sending {message.kind} email to {message.to_address}")
        return False
