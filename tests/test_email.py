import asyncio
import smtplib
import uuid

import pytest

from leaderboard_backend.core.config import settings
from leaderboard_backend.core.exceptions import EmailFailedException
from leaderboard_backend.models import AccountRecovery, User
from leaderboard_backend.services import email as email_module
from leaderboard_backend.services.email import EmailService


class FakeSMTP:
    instances = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.started_tls = False
        self.credentials = None
        self.messages = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def starttls(self):
        self.started_tls = True

    def login(self, user, password):
        self.credentials = (user, password)

    def send_message(self, message):
        self.messages.append(message)


class RefusingSMTP(FakeSMTP):
    def send_message(self, message):
        raise smtplib.SMTPRecipientsRefused({message["To"]: (550, b"no such user")})


@pytest.fixture
def smtp_settings(monkeypatch):
    FakeSMTP.instances = []
    monkeypatch.setattr(settings, "EMAILS_ENABLED", True)
    monkeypatch.setattr(settings, "SMTP_HOST", "smtp.example.com")
    monkeypatch.setattr(settings, "SMTP_USER", "mailer")
    monkeypatch.setattr(settings, "SMTP_PASSWORD", "secret")
    monkeypatch.setattr(email_module.smtplib, "SMTP", FakeSMTP)


def test_send_delivers_over_smtp(smtp_settings):
    asyncio.run(EmailService().send("runner@example.com", "Hello", "Body text"))

    smtp = FakeSMTP.instances[0]
    assert smtp.host == "smtp.example.com"
    assert smtp.started_tls
    assert smtp.credentials == ("mailer", "secret")
    message = smtp.messages[0]
    assert message["To"] == "runner@example.com"
    assert message["Subject"] == "Hello"
    assert settings.EMAIL_FROM_ADDRESS in message["From"]
    assert "Body text" in message.get_content()


def test_send_failure_raises(smtp_settings, monkeypatch):
    monkeypatch.setattr(email_module.smtplib, "SMTP", RefusingSMTP)

    with pytest.raises(EmailFailedException):
        asyncio.run(EmailService().send("runner@example.com", "Hello", "Body"))


def test_unconfigured_service_skips_delivery(monkeypatch):
    FakeSMTP.instances = []
    monkeypatch.setattr(settings, "EMAILS_ENABLED", False)
    monkeypatch.setattr(email_module.smtplib, "SMTP", FakeSMTP)

    asyncio.run(EmailService().send("runner@example.com", "Hello", "Body"))

    assert FakeSMTP.instances == []


def test_recovery_email_contains_link(smtp_settings):
    user = User(username="Runner", email="runner@example.com")
    recovery = AccountRecovery(id=uuid.uuid4())

    asyncio.run(EmailService().send_account_recovery(user, recovery))

    body = FakeSMTP.instances[0].messages[0].get_content()
    assert f"{settings.WEBSITE_URL}/reset-password?code={recovery.id}" in body
