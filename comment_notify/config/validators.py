"""Consistency checks for per-request notification settings."""

import logging
from typing import Iterable, List, Optional

from comment_notify.domain.models import NotifyConfig


def check_for_warnings(
    config: NotifyConfig,
    supported_channels: Optional[Iterable[str]] = None,
) -> List[str]:
    """
    Check notification settings for combinations that silently disable a feature.

    Args:
        config: Notification settings of the site
        supported_channels: Push channel names the dispatcher knows about;
            the channel check is skipped when omitted

    Returns:
        List of warning messages
    """
    warning_messages = []

    if bool(config.smtp_user) != bool(config.smtp_pass):
        warning_messages.append(
            "SMTP_USER and SMTP_PASS must both be set; email notifications are disabled"
        )

    if config.smtp_user and not config.smtp_service and not config.smtp_host:
        warning_messages.append(
            "Neither SMTP_SERVICE nor SMTP_HOST is set; email notifications are disabled"
        )

    if bool(config.pushoo_channel) != bool(config.pushoo_token):
        warning_messages.append(
            "PUSHOO_CHANNEL and PUSHOO_TOKEN must both be set; push notifications are disabled"
        )

    if config.pushoo_channel and supported_channels is not None:
        known = {name.lower() for name in supported_channels}
        if config.pushoo_channel.strip().lower() not in known:
            warning_messages.append(
                f"Unsupported PUSHOO_CHANNEL '{config.pushoo_channel}' "
                f"(supported: {', '.join(sorted(known))})"
            )

    if (config.qcloud_secret_id or config.qcloud_secret_key) and not (
        config.qcloud_secret_id and config.qcloud_secret_key
    ):
        warning_messages.append(
            "QCLOUD_SECRET_ID and QCLOUD_SECRET_KEY must both be set for content moderation"
        )

    if config.akismet_key and not config.site_url:
        warning_messages.append("AKISMET_KEY is set but SITE_URL is empty; key verification will fail")

    return warning_messages


def emit_warnings(warning_messages: List[str], logger=None) -> None:
    """
    Log warning messages about the notification settings.

    Args:
        warning_messages: Messages produced by check_for_warnings()
        logger: Logger to use (defaults to this module's logger)
    """
    log = logger or logging.getLogger(__name__)
    for message in warning_messages:
        log.warning(message, extra={"event": "config.warning"})
