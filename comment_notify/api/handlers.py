"""Handlers for the notify function's actions.

Each handler takes the action's raw ``data`` payload and returns the JSON
body of the response. Side-effect failures (avatar lookup, spam check,
notifications) are logged and never change the response code.
"""

from typing import Any, Dict, Optional

from comment_notify.avatar.qq import QQAvatarClient, resolve_qq_avatar
from comment_notify.domain.models import ResultCode
from comment_notify.logging import get_logger
from comment_notify.notifications.models import NotificationError
from comment_notify.notifications.service import NotificationService
from comment_notify.notifications.transport import MailTransportLifecycle, build_sender_address
from comment_notify.spam.classifier import SpamClassifier
from comment_notify.utils.mail import is_qq, qq_number

from .models import EmailTestRequest, PostSubmitRequest, QQAvatarRequest, parse_request

logger = get_logger(__name__, component="handler")

TEST_MAIL_SUBJECT = "评论通知测试邮件"
TEST_MAIL_BODY = "如果您收到这封邮件，说明评论邮件通知功能配置正确"


class NotifyHandlers:
    """The three actions: postSubmit, emailTest and getQQAvatar."""

    def __init__(
        self,
        qq_client: QQAvatarClient,
        spam_classifier: SpamClassifier,
        notification_service: NotificationService,
        transport_lifecycle: Optional[MailTransportLifecycle] = None,
    ):
        self.qq_client = qq_client
        self.spam_classifier = spam_classifier
        self.notification_service = notification_service
        self.transport_lifecycle = transport_lifecycle or notification_service.transport_lifecycle

    def post_submit(self, data: Any) -> Dict[str, Any]:
        """Post-submit processing of a freshly stored comment.

        Steps:
        1. Resolve a QQ avatar when the comment has none
        2. Classify spam unless the comment is already flagged
        3. Fan out notifications

        Returns:
            ``{code, isSpam, avatar}``; ``avatar`` is omitted when unknown

        Raises:
            InvalidRequestError: If ``comment`` is missing or malformed
        """
        request = parse_request(PostSubmitRequest, data)
        comment, config = request.comment, request.config

        try:
            resolve_qq_avatar(comment, self.qq_client)
        except Exception as e:
            logger.warning(
                f"QQ avatar resolution failed: {e}",
                extra={"event": "avatar.qq.failed", "error_type": type(e).__name__},
            )

        if not comment.is_spam:
            comment.is_spam = self.spam_classifier.classify(comment, config)

        try:
            self.notification_service.send_notice(comment, config, request.parent_comment)
        except Exception as e:
            logger.error(
                f"Sending notifications failed: {e}",
                exc_info=True,
                extra={"event": "notification.fanout.failed", "error_type": type(e).__name__},
            )

        # Undetermined verdicts are reported as not spam
        body: Dict[str, Any] = {"code": ResultCode.SUCCESS, "isSpam": bool(comment.is_spam)}
        if comment.avatar:
            body["avatar"] = comment.avatar
        return body

    def email_test(self, data: Any) -> Dict[str, Any]:
        """Send a test mail with freshly verified SMTP settings (admins only).

        Returns:
            ``{result}`` on success, ``{message}`` on failure, or a NEED_LOGIN
            body for non-admin callers
        """
        request = parse_request(EmailTestRequest, data)
        if not request.is_admin:
            return {"code": ResultCode.NEED_LOGIN, "message": "please log in first"}

        config = request.config
        recipient = request.event.get("mail") or config.blogger_email or config.sender_email
        try:
            self.transport_lifecycle.reset()
            transport = self.transport_lifecycle.ensure(config, raise_errors=True)
            result = transport.send(
                recipient,
                TEST_MAIL_SUBJECT,
                TEST_MAIL_BODY,
                build_sender_address(None, config.sender_email),
            )
        except NotificationError as e:
            logger.warning(
                f"Test mail failed: {e}",
                extra={"event": "email_test.failed", "error_type": type(e).__name__},
            )
            return {"message": str(e)}

        logger.info(
            f"Test mail sent to {recipient}",
            extra={"event": "email_test.sent", "message_id": result.message_id},
        )
        return {"result": result.to_dict()}

    def get_qq_avatar(self, data: Any) -> Dict[str, Any]:
        """Look up the avatar of a QQ mail address.

        Returns:
            ``{code: SUCCESS, avatar}`` (avatar is None when the lookup failed),
            or FAIL for addresses that are not QQ addresses
        """
        request = parse_request(QQAvatarRequest, data)
        if not is_qq(request.mail):
            return {"code": ResultCode.FAIL, "message": "not a QQ mail address"}

        avatar = self.qq_client.get_avatar(qq_number(request.mail))
        return {"code": ResultCode.SUCCESS, "avatar": avatar}
