"""Notification fan-out for a submitted comment.

This module provides the NotificationService class that runs the three
independent notifications for a comment (owner mail, reply mail, instant
message push) concurrently and never lets one of them fail the request.
"""

import contextvars
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional

from comment_notify.config.validators import check_for_warnings, emit_warnings
from comment_notify.domain.models import Comment, NotifyConfig
from comment_notify.logging import get_logger
from comment_notify.logging.context import log_context
from comment_notify.utils.mail import equals_mail

from .models import NotificationError, NotificationResult
from .payloads import build_owner_context, build_push_context, build_reply_context
from .push import PushDispatcher
from .templates import TemplateRenderer
from .transport import MailTransport, MailTransportLifecycle, build_sender_address

logger = get_logger(__name__, component="notification")


class NotificationService:
    """Sends the notifications a new comment triggers.

    Three attempts run side by side for every comment:
    1. Owner mail: tells the site owner about the new comment
    2. Reply mail: tells the author of the parent comment about the reply
    3. Push: instant message to the owner's configured chat channel

    Each attempt decides on its own whether it applies, and each one's
    failure is logged and reported as a ``failed`` result.
    """

    def __init__(
        self,
        transport_lifecycle: Optional[MailTransportLifecycle] = None,
        template_renderer: Optional[TemplateRenderer] = None,
        push_dispatcher: Optional[PushDispatcher] = None,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """Initialize notification service.

        Args:
            transport_lifecycle: Shared SMTP transport lifecycle (creates one if None)
            template_renderer: Template renderer instance (creates default if None)
            push_dispatcher: Push dispatcher instance (creates default if None)
            logger_instance: Logger instance (uses module logger if None)
        """
        self.transport_lifecycle = transport_lifecycle or MailTransportLifecycle()
        self.template_renderer = template_renderer or TemplateRenderer()
        self.push_dispatcher = push_dispatcher or PushDispatcher()
        self.logger = logger_instance or logger

    def send_notice(
        self,
        comment: Comment,
        config: NotifyConfig,
        parent_comment: Optional[Comment] = None,
    ) -> List[NotificationResult]:
        """Run all notifications for a comment and wait for every one to settle.

        Args:
            comment: The submitted comment
            config: Site notification settings
            parent_comment: Comment being replied to, if any

        Returns:
            One NotificationResult per attempt that settled (empty when
            notifications are suppressed for spam)
        """
        if comment.is_spam and not config.notify_spam:
            self.logger.info(
                "Comment is spam and spam notifications are disabled",
                extra={"event": "notification.skip", "reason": "spam"},
            )
            return []

        emit_warnings(
            check_for_warnings(config, self.push_dispatcher.supported_channels()),
            logger=self.logger,
        )

        attempts = [
            ("owner", self.notify_owner, (comment, config)),
            ("reply", self.notify_reply, (comment, config, parent_comment)),
            ("push", self.notify_push, (comment, config)),
        ]

        results: List[NotificationResult] = []
        try:
            with log_context(comment_id=comment.identifier), ThreadPoolExecutor(
                max_workers=len(attempts), thread_name_prefix="notify"
            ) as executor:
                # One context copy per task; a Context cannot be entered by two threads
                futures = [
                    executor.submit(
                        contextvars.copy_context().run, self._settle, channel, attempt, *args
                    )
                    for channel, attempt, args in attempts
                ]
                for future in futures:
                    results.append(future.result())
        except Exception as e:
            self.logger.error(
                f"Notification fan-out failed: {e}",
                exc_info=True,
                extra={"event": "notification.fanout.failed", "error_type": type(e).__name__},
            )

        sent = sum(1 for r in results if r.status == "sent")
        skipped = sum(1 for r in results if r.status == "skipped")
        failed = sum(1 for r in results if r.status == "failed")
        self.logger.info(
            f"Notifications complete: {sent} sent, {skipped} skipped, {failed} failed",
            extra={"event": "notification.fanout.completed"},
        )
        return results

    def _settle(self, channel: str, attempt: Callable[..., NotificationResult], *args) -> NotificationResult:
        """Run one attempt, turning any escaping exception into a failed result."""
        try:
            return attempt(*args)
        except Exception as e:
            self.logger.error(
                f"{channel} notification failed: {e}",
                exc_info=True,
                extra={"event": "notification.send.failure", "channel": channel, "error_type": type(e).__name__},
            )
            return NotificationResult(channel=channel, status="failed", error=str(e))

    def _skip(self, channel: str, reason: str, message: str) -> NotificationResult:
        self.logger.info(
            message,
            extra={"event": "notification.skip", "channel": channel, "reason": reason},
        )
        return NotificationResult(channel=channel, status="skipped", reason=reason)

    def _deliver(
        self,
        channel: str,
        transport: MailTransport,
        to: Optional[str],
        rendered: dict,
        config: NotifyConfig,
    ) -> NotificationResult:
        try:
            sender = build_sender_address(config.sender_name, config.sender_email)
            send_result = transport.send(to, rendered["subject"], rendered["html"], sender)
        except NotificationError as e:
            self.logger.error(
                f"{channel} mail delivery failed: {e}",
                extra={"event": "notification.send.failure", "channel": channel, "error_type": type(e).__name__},
            )
            return NotificationResult(channel=channel, status="failed", error=str(e))

        self.logger.info(
            f"{channel} mail sent to {to}",
            extra={
                "event": "notification.send.success",
                "channel": channel,
                "message_id": send_result.message_id,
                "rejected": send_result.rejected,
            },
        )
        return NotificationResult(channel=channel, status="sent")

    def notify_owner(self, comment: Comment, config: NotifyConfig) -> NotificationResult:
        """Mail the site owner about a new comment."""
        transport = self.transport_lifecycle.ensure(config)
        if transport is None:
            return self._skip("owner", "transport_unavailable", "Mail is not configured or not working, owner not notified")

        if equals_mail(config.blogger_email, comment.mail):
            return self._skip("owner", "author_is_owner", "Comment by the owner, owner not notified")

        if config.has_push and not config.sc_mail_notify:
            return self._skip("owner", "push_configured", "Push is configured, owner mail not sent")

        try:
            context = build_owner_context(comment, config)
            rendered = self.template_renderer.render_owner_mail(context, config)
        except NotificationError as e:
            return NotificationResult(channel="owner", status="failed", error=str(e))

        return self._deliver("owner", transport, config.blogger_email or config.sender_email, rendered, config)

    def notify_reply(
        self,
        comment: Comment,
        config: NotifyConfig,
        parent_comment: Optional[Comment],
    ) -> NotificationResult:
        """Mail the author of the parent comment about a reply."""
        if not comment.pid:
            return self._skip("reply", "no_parent_reference", "Comment is not a reply, no reply mail")

        if parent_comment is None:
            return self._skip("reply", "parent_missing", "Parent comment not supplied, no reply mail")

        transport = self.transport_lifecycle.ensure(config)
        if transport is None:
            return self._skip("reply", "transport_unavailable", "Mail is not configured or not working, no reply mail")

        if equals_mail(config.blogger_email, parent_comment.mail):
            return self._skip("reply", "parent_is_owner", "Reply to the owner is covered by the owner mail")

        if equals_mail(comment.mail, parent_comment.mail):
            return self._skip("reply", "self_reply", "Reply to own comment, no reply mail")

        try:
            context = build_reply_context(comment, parent_comment, config)
            rendered = self.template_renderer.render_reply_mail(context, config)
        except NotificationError as e:
            return NotificationResult(channel="reply", status="failed", error=str(e))

        return self._deliver("reply", transport, parent_comment.mail, rendered, config)

    def notify_push(self, comment: Comment, config: NotifyConfig) -> NotificationResult:
        """Push an instant message about a new comment to the owner."""
        if not config.has_push:
            return self._skip("push", "push_not_configured", "No push channel configured")

        if equals_mail(config.blogger_email, comment.mail):
            return self._skip("push", "author_is_owner", "Comment by the owner, no push")

        try:
            context = build_push_context(comment, config)
            rendered = self.template_renderer.render_push(context, config)
            self.push_dispatcher.send(
                config.pushoo_channel,
                config.pushoo_token,
                rendered["title"],
                rendered["content"],
                url=context["POST_URL"],
            )
        except NotificationError as e:
            self.logger.error(
                f"push notification failed: {e}",
                extra={"event": "notification.send.failure", "channel": "push", "error_type": type(e).__name__},
            )
            return NotificationResult(channel="push", status="failed", error=str(e))

        return NotificationResult(channel="push", status="sent")
