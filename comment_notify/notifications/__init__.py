"""Notification delivery for submitted comments.

This module provides the complete notification pipeline:
- NotificationService: concurrent owner/reply/push fan-out
- NotificationResult: outcome of one notification attempt
- TemplateRenderer: placeholder substitution and built-in Jinja2 layouts
- MailTransport / MailTransportLifecycle: verified, reused SMTP transport
- PushDispatcher: instant-message channels
- Payload builders: placeholder values and permalinks
"""

from .models import (
    MailSendResult,
    NotificationError,
    NotificationResult,
    NotificationTemplateError,
    PushError,
    SMTPDeliveryError,
    TransportConfigurationError,
    TransportVerificationError,
)
from .payloads import (
    build_owner_context,
    build_permalink,
    build_push_context,
    build_reply_context,
)
from .push import PushDispatcher
from .service import NotificationService
from .templates import TemplateRenderer, substitute_placeholders
from .transport import (
    MailTransport,
    MailTransportLifecycle,
    SMTPSettings,
    TransportState,
    build_sender_address,
)

__all__ = [
    # Main service
    "NotificationService",
    # Models and results
    "NotificationResult",
    "MailSendResult",
    # Exceptions
    "NotificationError",
    "NotificationTemplateError",
    "SMTPDeliveryError",
    "TransportConfigurationError",
    "TransportVerificationError",
    "PushError",
    # Components
    "TemplateRenderer",
    "MailTransport",
    "MailTransportLifecycle",
    "SMTPSettings",
    "TransportState",
    "PushDispatcher",
    # Utilities
    "build_owner_context",
    "build_reply_context",
    "build_push_context",
    "build_permalink",
    "build_sender_address",
    "substitute_placeholders",
]
