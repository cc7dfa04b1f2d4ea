"""SMTP mail transport for distribution reports.

Every message opens its own SMTP connection, so one transport instance
can be shared by concurrently running dispatch tasks.

Safety: recipient addresses are never logged.
"""
from __future__ import annotations

import logging
import smtplib
from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Protocol

from app.distribution.exceptions import TransportError
from app.distribution.models import Attachment

logger = logging.getLogger(__name__)


class MailTransport(Protocol):
    def send(
        self,
        to: str,
        sender: str,
        subject: str,
        body_text: str,
        attachment: Attachment,
    ) -> None:
        ...


def build_message(
    to: str,
    sender: str,
    subject: str,
    body_text: str,
    attachment: Attachment,
) -> MIMEMultipart:
    """Return a multipart message with a plain-text body and one attachment."""
    msg = MIMEMultipart()
    msg["Subject"] = subject
    msg["From"] = sender
    msg["To"] = to
    msg.attach(MIMEText(body_text, "plain", "utf-8"))

    _, _, subtype = attachment.mime_type.partition("/")
    part = MIMEApplication(attachment.content, _subtype=subtype or "octet-stream")
    part.add_header("Content-Disposition", "attachment", filename=attachment.filename)
    msg.attach(part)
    return msg


class SmtpMailTransport:
    """Deliver messages through an SMTP relay."""

    def __init__(
        self,
        host: str,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        timeout: float = 30.0,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    def send(
        self,
        to: str,
        sender: str,
        subject: str,
        body_text: str,
        attachment: Attachment,
    ) -> None:
        msg = build_message(to, sender, subject, body_text, attachment)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                if self.use_tls:
                    server.starttls()
                if self.username and self.password:
                    server.login(self.username, self.password)
                server.sendmail(sender, [to], msg.as_string())
        except (smtplib.SMTPException, OSError) as exc:
            reason = type(exc).__name__
            logger.warning("SMTP delivery failed for %r: %s", subject, reason)
            raise TransportError(f"SMTP delivery failed: {reason}") from exc
        logger.info("Delivered %r via %s:%d", subject, self.host, self.port)
