"""Data models and exceptions for the notification service."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


class NotificationError(Exception):
    """Base exception for notification-related errors."""

    pass


class NotificationTemplateError(NotificationError):
    """Raised when a mail body or subject cannot be rendered."""

    pass


class SMTPDeliveryError(NotificationError):
    """Raised when the SMTP server refuses or fails to accept a message."""

    pass


class TransportConfigurationError(NotificationError):
    """Raised when the settings do not describe a usable SMTP server."""

    pass


class TransportVerificationError(NotificationError):
    """Raised when connecting or authenticating to the SMTP server fails."""

    pass


class PushError(NotificationError):
    """Raised when an instant-message push cannot be delivered."""

    pass


@dataclass
class NotificationResult:
    """Outcome of one notification attempt.

    Attributes:
        channel: Which notification this was (owner, reply, push)
        status: Outcome status (sent, skipped, failed)
        reason: Why the attempt was skipped, if it was
        error: Error message if delivery failed
    """

    channel: str
    status: str  # "sent", "skipped", "failed"
    reason: Optional[str] = None
    error: Optional[str] = None

    def is_success(self) -> bool:
        return self.status == "sent"


@dataclass
class MailSendResult:
    """What the SMTP server accepted for one message."""

    message_id: Optional[str]
    accepted: List[str] = field(default_factory=list)
    rejected: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "messageId": self.message_id,
            "accepted": list(self.accepted),
            "rejected": list(self.rejected),
        }
