"""SMTP transport and its process-wide lifecycle.

This module provides:
- SMTPSettings: immutable server/credential settings resolved from a site's config
- MailTransport: a thin wrapper around smtplib for verifying and sending mail
- MailTransportLifecycle: lazily builds and verifies one transport and reuses it
"""

import re
import smtplib
import ssl
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr, make_msgid
from enum import Enum
from typing import Callable, Optional

from email_validator import EmailNotValidError, validate_email

from comment_notify.domain.models import NotifyConfig
from comment_notify.logging import get_logger
from comment_notify.utils.text import strip_html

from .models import (
    MailSendResult,
    SMTPDeliveryError,
    TransportConfigurationError,
    TransportVerificationError,
)

logger = get_logger(__name__, component="transport")


# host, port, implicit TLS; keys are lower-cased nodemailer service names and aliases
WELL_KNOWN_SERVICES = {
    "126": ("smtp.126.com", 465, True),
    "163": ("smtp.163.com", 465, True),
    "1und1": ("smtp.1und1.de", 465, True),
    "aliyun": ("smtp.aliyun.com", 465, True),
    "aol": ("smtp.aol.com", 587, False),
    "bluewin": ("smtpauths.bluewin.ch", 465, True),
    "debugmail": ("debugmail.io", 25, False),
    "dynectemail": ("smtp.dynect.net", 25, False),
    "ethereal": ("smtp.ethereal.email", 587, False),
    "fastmail": ("smtp.fastmail.com", 465, True),
    "forwardemail": ("smtp.forwardemail.net", 465, True),
    "gandimail": ("mail.gandi.net", 587, False),
    "gmail": ("smtp.gmail.com", 465, True),
    "googlemail": ("smtp.gmail.com", 465, True),
    "godaddy": ("smtpout.secureserver.net", 25, False),
    "godaddyasia": ("smtp.asia.secureserver.net", 25, False),
    "godaddyeurope": ("smtp.europe.secureserver.net", 25, False),
    "hot.ee": ("mail.hot.ee", 25, False),
    "hotmail": ("smtp-mail.outlook.com", 587, False),
    "hotmail.com": ("smtp-mail.outlook.com", 587, False),
    "outlook": ("smtp-mail.outlook.com", 587, False),
    "outlook.com": ("smtp-mail.outlook.com", 587, False),
    "outlook365": ("smtp.office365.com", 587, False),
    "icloud": ("smtp.mail.me.com", 587, False),
    "me": ("smtp.mail.me.com", 587, False),
    "mac": ("smtp.mail.me.com", 587, False),
    "infomaniak": ("mail.infomaniak.com", 587, False),
    "mail.ee": ("smtp.mail.ee", 25, False),
    "mail.ru": ("smtp.mail.ru", 465, True),
    "maildev": ("127.0.0.1", 1025, False),
    "mailgun": ("smtp.mailgun.org", 465, True),
    "mailjet": ("in.mailjet.com", 587, False),
    "mailosaur": ("mailosaur.io", 25, False),
    "mailtrap": ("live.smtp.mailtrap.io", 587, False),
    "mandrill": ("smtp.mandrillapp.com", 587, False),
    "naver": ("smtp.naver.com", 587, False),
    "one": ("send.one.com", 465, True),
    "openmailbox": ("smtp.openmailbox.org", 465, True),
    "postmark": ("smtp.postmarkapp.com", 2525, False),
    "qiye.aliyun": ("smtp.mxhichina.com", 465, True),
    "qq": ("smtp.qq.com", 465, True),
    "qqex": ("smtp.exmail.qq.com", 465, True),
    "sendcloud": ("smtp.sendcloud.net", 2525, False),
    "sendgrid": ("smtp.sendgrid.net", 587, False),
    "sendinblue": ("smtp-relay.sendinblue.com", 587, False),
    "sendpulse": ("smtp-pulse.com", 465, True),
    "ses": ("email-smtp.us-east-1.amazonaws.com", 465, True),
    "ses-us-east-1": ("email-smtp.us-east-1.amazonaws.com", 465, True),
    "ses-us-west-2": ("email-smtp.us-west-2.amazonaws.com", 465, True),
    "ses-eu-west-1": ("email-smtp.eu-west-1.amazonaws.com", 465, True),
    "sina": ("smtp.sina.com", 465, True),
    "sohu": ("smtp.sohu.com", 465, True),
    "sparkpost": ("smtp.sparkpostmail.com", 587, False),
    "tipimail": ("smtp.tipimail.com", 587, False),
    "yahoo": ("smtp.mail.yahoo.com", 465, True),
    "yahoomail": ("smtp.mail.yahoo.com", 465, True),
    "yandex": ("smtp.yandex.ru", 465, True),
    "yeah": ("smtp.yeah.net", 465, True),
    "zoho": ("smtp.zoho.com", 465, True),
}

_SERVICE_KEY_PATTERN = re.compile(r"[^a-z0-9.\-]")


def resolve_service(name: str) -> Optional[tuple]:
    """Look up a named mail service, ignoring case, spaces and punctuation."""
    key = _SERVICE_KEY_PATTERN.sub("", name.strip().lower())
    return WELL_KNOWN_SERVICES.get(key)


@dataclass(frozen=True)
class SMTPSettings:
    """Connection settings for one SMTP account."""

    host: str
    port: int
    secure: bool
    user: str
    password: str
    service: Optional[str] = None

    @classmethod
    def from_config(cls, config: Optional[NotifyConfig]) -> "SMTPSettings":
        """Resolve SMTP settings from a site's notification settings.

        SMTP_SERVICE takes precedence over SMTP_HOST/SMTP_PORT/SMTP_SECURE.

        Raises:
            TransportConfigurationError: If credentials or a server are missing
        """
        if config is None or not config.smtp_user or not config.smtp_pass:
            raise TransportConfigurationError("SMTP credentials are not configured")

        if config.smtp_service:
            resolved = resolve_service(config.smtp_service)
            if resolved is None:
                raise TransportConfigurationError(
                    f"Unknown SMTP_SERVICE: '{config.smtp_service}'. "
                    f"Supported: {', '.join(sorted(WELL_KNOWN_SERVICES))}"
                )
            host, port, secure = resolved
            return cls(
                host=host,
                port=port,
                secure=secure,
                user=config.smtp_user,
                password=config.smtp_pass,
                service=config.smtp_service,
            )

        if config.smtp_host:
            # Without SMTP_PORT the submission port for the TLS mode applies
            port = config.smtp_port or (465 if config.smtp_secure else 587)
            if not 1 <= port <= 65535:
                raise TransportConfigurationError(
                    f"Invalid SMTP_PORT for host {config.smtp_host}: {port}"
                )
            return cls(
                host=config.smtp_host,
                port=port,
                secure=config.smtp_secure,
                user=config.smtp_user,
                password=config.smtp_pass,
            )

        raise TransportConfigurationError("SMTP server is not configured")


def build_sender_address(name: Optional[str], address: Optional[str]) -> str:
    """Format the From header, e.g. ``"My Blog" <noreply@example.com>``."""
    if not address:
        raise SMTPDeliveryError("SENDER_EMAIL is not configured")
    if not name:
        return address
    return formataddr((name, address))


def normalize_recipient(address: Optional[str]) -> str:
    """Validate a recipient address and return its normalized form.

    Raises:
        SMTPDeliveryError: If the address is missing or malformed
    """
    if not address:
        raise SMTPDeliveryError("Recipient address is empty")
    try:
        return validate_email(address.strip(), check_deliverability=False).normalized
    except EmailNotValidError as e:
        raise SMTPDeliveryError(f"Invalid recipient address '{address}': {e}") from e


class MailTransport:
    """SMTP connection wrapper for one verified account.

    Every send opens a fresh connection; nothing is held open between
    requests. SMTP factories are injectable for testing.
    """

    def __init__(
        self,
        settings: SMTPSettings,
        smtp_factory: Optional[Callable] = None,
        smtp_ssl_factory: Optional[Callable] = None,
        timeout: int = 15,
    ):
        """
        Args:
            settings: Resolved server and credential settings
            smtp_factory: Factory for plain SMTP connections (for mocking)
            smtp_ssl_factory: Factory for implicit-TLS connections (for mocking)
            timeout: Socket timeout in seconds
        """
        self.settings = settings
        self.smtp_factory = smtp_factory or smtplib.SMTP
        self.smtp_ssl_factory = smtp_ssl_factory or smtplib.SMTP_SSL
        self.timeout = timeout

    def _connect(self):
        """Open an authenticated connection.

        Secure settings use implicit TLS; otherwise STARTTLS is used when the
        server offers it.
        """
        settings = self.settings
        context = ssl.create_default_context()

        if settings.secure:
            logger.debug(
                f"Connecting to {settings.host}:{settings.port} with implicit TLS",
                extra={"event": "transport.connect"},
            )
            smtp = self.smtp_ssl_factory(
                settings.host, settings.port, timeout=self.timeout, context=context
            )
        else:
            logger.debug(
                f"Connecting to {settings.host}:{settings.port}",
                extra={"event": "transport.connect"},
            )
            smtp = self.smtp_factory(settings.host, settings.port, timeout=self.timeout)

        try:
            if not settings.secure:
                smtp.ehlo()
                if smtp.has_extn("starttls"):
                    smtp.starttls(context=context)
                    smtp.ehlo()
            smtp.login(settings.user, settings.password)
        except Exception:
            self._close(smtp)
            raise
        return smtp

    @staticmethod
    def _close(smtp) -> None:
        try:
            smtp.quit()
        except Exception as e:
            # QUIT fails on a broken session; drop the socket instead
            logger.warning(f"Error closing SMTP connection: {e}")
            smtp.close()

    def verify(self) -> bool:
        """Connect and authenticate once to prove the settings work.

        Raises:
            TransportVerificationError: If the handshake or login fails
        """
        try:
            smtp = self._connect()
        except (smtplib.SMTPException, OSError) as e:
            raise TransportVerificationError(f"SMTP verification failed: {e}") from e

        self._close(smtp)
        return True

    def send(self, to: str, subject: str, html: str, sender: str) -> MailSendResult:
        """Send one HTML message.

        A plain-text alternative is derived from the HTML body.

        Args:
            to: Recipient address
            subject: Subject line
            html: HTML body
            sender: Formatted From header

        Returns:
            MailSendResult with accepted/rejected recipients

        Raises:
            SMTPDeliveryError: If the recipient is invalid or delivery fails
        """
        recipient = normalize_recipient(to)

        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = sender
        message["To"] = recipient
        message["Message-ID"] = make_msgid(domain=self.settings.host)
        message.set_content(strip_html(html) or subject)
        message.add_alternative(html, subtype="html")

        smtp = None
        try:
            smtp = self._connect()
            refused = smtp.send_message(message) or {}
        except smtplib.SMTPException as e:
            raise SMTPDeliveryError(f"SMTP error during message delivery: {e}") from e
        except OSError as e:
            raise SMTPDeliveryError(f"Network error during SMTP connection: {e}") from e
        finally:
            if smtp is not None:
                self._close(smtp)

        rejected = list(refused)
        accepted = [recipient] if recipient not in refused else []
        return MailSendResult(message_id=message["Message-ID"], accepted=accepted, rejected=rejected)


class TransportState(str, Enum):
    """Lifecycle states of the shared transport."""

    UNINITIALIZED = "uninitialized"
    VERIFIED = "verified"


class MailTransportLifecycle:
    """Lazily built, verified and reused SMTP transport.

    The first caller that needs mail builds a transport from its settings
    and verifies it against the server; later callers reuse it until
    reset() is called. A failed verification leaves the lifecycle
    uninitialized so the next caller tries again.

    Initialization is not locked: two concurrent first uses may both verify,
    and the last one to finish is kept.
    """

    def __init__(
        self,
        transport_factory: Optional[Callable[[SMTPSettings], MailTransport]] = None,
        smtp_timeout: int = 15,
    ):
        """
        Args:
            transport_factory: Builds a MailTransport from settings (for mocking)
            smtp_timeout: Socket timeout passed to default transports
        """
        self.transport_factory = transport_factory or (
            lambda settings: MailTransport(settings, timeout=smtp_timeout)
        )
        self._transport: Optional[MailTransport] = None

    @property
    def state(self) -> TransportState:
        if self._transport is None:
            return TransportState.UNINITIALIZED
        return TransportState.VERIFIED

    @property
    def current(self) -> Optional[MailTransport]:
        return self._transport

    def ensure(self, config: Optional[NotifyConfig], raise_errors: bool = False) -> Optional[MailTransport]:
        """Return the verified transport, building it on first use.

        Args:
            config: Site notification settings holding SMTP credentials
            raise_errors: Propagate configuration/verification errors instead
                of logging a warning and returning None

        Returns:
            Verified transport, or None when it cannot be established

        Raises:
            TransportConfigurationError, TransportVerificationError: Only
                when raise_errors is True
        """
        if self._transport is not None:
            return self._transport

        try:
            settings = SMTPSettings.from_config(config)
            transport = self.transport_factory(settings)
            transport.verify()
        except (TransportConfigurationError, TransportVerificationError) as e:
            if raise_errors:
                logger.error(
                    f"Mail transport initialization failed: {e}",
                    extra={"event": "transport.verify.failed", "error_type": type(e).__name__},
                )
                raise
            logger.warning(
                f"Mail transport initialization failed: {e}",
                extra={"event": "transport.verify.failed", "error_type": type(e).__name__},
            )
            return None

        self._transport = transport
        logger.info(
            "SMTP settings verified",
            extra={
                "event": "transport.verify.succeeded",
                "smtp_host": settings.host,
                "smtp_port": settings.port,
            },
        )
        return transport

    def reset(self) -> None:
        """Forget the cached transport so the next ensure() verifies again."""
        if self._transport is not None:
            logger.info("Resetting mail transport", extra={"event": "transport.reset"})
        self._transport = None
