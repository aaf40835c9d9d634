"""Unit tests for the notification fan-out.

Tests the NotificationService for:
- Spam suppression of the whole fan-out
- Owner mail skip rules and push priority
- The four independent reply skip rules
- Push skip rules
- Error isolation between the three attempts
"""

import threading
from unittest.mock import Mock

import pytest

from comment_notify.domain.models import Comment, NotifyConfig
from comment_notify.logging.context import get_log_context
from comment_notify.notifications import NotificationResult, NotificationService, PushError
from tests.helpers import FakeLifecycle, FakePushDispatcher, FakeTransport
from tests.helpers.fakes import failing_transport


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def push():
    return FakePushDispatcher()


@pytest.fixture
def service(transport, push):
    return NotificationService(transport_lifecycle=FakeLifecycle(transport), push_dispatcher=push)


@pytest.fixture
def push_config(notify_config):
    return notify_config.model_copy(update={"pushoo_channel": "bark", "pushoo_token": "device-key"})


def by_channel(results):
    return {result.channel: result for result in results}


class TestSendNotice:
    """Tests for the fan-out as a whole."""

    def test_sends_owner_mail_for_visitor_comment(self, service, transport, comment, notify_config):
        """Test the common case: a top-level comment mails the owner only."""
        results = by_channel(service.send_notice(comment, notify_config))

        assert results["owner"].status == "sent"
        assert results["reply"].status == "skipped"
        assert results["push"].status == "skipped"
        assert transport.recipients() == ["owner@example.com"]
        assert transport.sent[0]["sender"] == "My Blog <noreply@example.com>"
        assert transport.sent[0]["subject"] == "My Blog上有新评论了"

    def test_reply_mails_owner_and_parent(self, service, transport, reply_comment, parent_comment, notify_config):
        """Test that a reply mails both the owner and the parent's author."""
        results = by_channel(service.send_notice(reply_comment, notify_config, parent_comment))

        assert results["owner"].status == "sent"
        assert results["reply"].status == "sent"
        assert transport.recipients() == ["alice@example.com", "owner@example.com"]

    def test_spam_suppressed_when_disabled(self, service, transport, comment, notify_config):
        """Test that NOTIFY_SPAM=false skips everything for spam."""
        comment.is_spam = True
        config = notify_config.model_copy(update={"notify_spam": False})

        assert service.send_notice(comment, config) == []
        assert transport.sent == []

    def test_spam_notified_by_default(self, service, transport, comment, notify_config):
        """Test that spam is still notified unless disabled."""
        comment.is_spam = True

        results = by_channel(service.send_notice(comment, notify_config))

        assert results["owner"].status == "sent"

    def test_one_failure_does_not_stop_others(self, reply_comment, parent_comment, push_config):
        """Test error isolation: a failing transport does not block push."""
        push = FakePushDispatcher()
        config = push_config.model_copy(update={"sc_mail_notify": True})
        service = NotificationService(
            transport_lifecycle=FakeLifecycle(failing_transport()), push_dispatcher=push
        )

        results = by_channel(service.send_notice(reply_comment, config, parent_comment))

        assert results["owner"].status == "failed"
        assert results["reply"].status == "failed"
        assert results["push"].status == "sent"
        assert len(push.pushes) == 1

    def test_unexpected_exception_is_settled(self, service, comment, notify_config, monkeypatch):
        """Test that an exception escaping an attempt becomes a failed result."""
        monkeypatch.setattr(service, "notify_owner", Mock(side_effect=RuntimeError("bug")))

        results = by_channel(service.send_notice(comment, notify_config))

        assert results["owner"].status == "failed"
        assert results["owner"].error == "bug"
        assert results["reply"].status == "skipped"

    def test_attempts_run_concurrently(self, push_config, reply_comment, parent_comment):
        """Test that all three attempts are in flight at the same time."""
        barrier = threading.Barrier(3, timeout=5)
        service = NotificationService(
            transport_lifecycle=FakeLifecycle(FakeTransport()), push_dispatcher=FakePushDispatcher()
        )

        def waiting(channel):
            def attempt(*args):
                barrier.wait()
                return NotificationResult(channel=channel, status="sent")
            return attempt

        service.notify_owner = waiting("owner")
        service.notify_reply = waiting("reply")
        service.notify_push = waiting("push")

        results = service.send_notice(reply_comment, push_config, parent_comment)

        assert [r.status for r in results] == ["sent", "sent", "sent"]

    def test_log_context_reaches_workers(self, service, comment, notify_config):
        """Test that workers log with the comment id of the request."""
        seen = {}

        def attempt(*args):
            seen.update(get_log_context())
            return NotificationResult(channel="owner", status="skipped")

        service.notify_owner = attempt

        service.send_notice(comment, notify_config)

        assert seen["comment_id"] == "c-2"


class TestOwnerNotification:
    """Tests for owner mail skip rules."""

    def test_skipped_without_transport(self, push, comment, notify_config):
        """Test that an unavailable transport skips the mail."""
        service = NotificationService(transport_lifecycle=FakeLifecycle(None), push_dispatcher=push)

        result = service.notify_owner(comment, notify_config)

        assert result.status == "skipped"
        assert result.reason == "transport_unavailable"

    def test_skipped_for_owner_comment(self, service, transport, notify_config):
        """Test no self-notification for the owner."""
        comment = Comment(id="c-3", mail="OWNER@example.com ", href="https://x/y")

        result = service.notify_owner(comment, notify_config)

        assert result.reason == "author_is_owner"
        assert transport.sent == []

    def test_push_takes_priority(self, service, transport, comment, push_config):
        """Test that push replaces owner mail unless SC_MAIL_NOTIFY is set."""
        result = service.notify_owner(comment, push_config)

        assert result.reason == "push_configured"
        assert transport.sent == []

    def test_mail_and_push_when_opted_in(self, service, transport, push, comment, push_config):
        """Test SC_MAIL_NOTIFY=true sends both."""
        config = push_config.model_copy(update={"sc_mail_notify": True})

        results = by_channel(service.send_notice(comment, config))

        assert results["owner"].status == "sent"
        assert results["push"].status == "sent"

    def test_falls_back_to_sender_address(self, service, transport, comment, notify_config):
        """Test that mail goes to SENDER_EMAIL when BLOGGER_EMAIL is unset."""
        config = notify_config.model_copy(update={"blogger_email": None})

        service.notify_owner(comment, config)

        assert transport.recipients() == ["noreply@example.com"]

    def test_custom_template(self, service, transport, comment, notify_config):
        """Test that MAIL_TEMPLATE_ADMIN is used for the body."""
        config = notify_config.model_copy(update={"mail_template_admin": "Hi ${NICK}, ${COMMENT}"})

        service.notify_owner(comment, config)

        assert transport.sent[0]["html"] == "Hi Bob, <p>hello</p>"

    def test_delivery_failure(self, push, comment, notify_config):
        """Test that SMTP errors become a failed result."""
        service = NotificationService(
            transport_lifecycle=FakeLifecycle(failing_transport("mailbox full")), push_dispatcher=push
        )

        result = service.notify_owner(comment, notify_config)

        assert result.status == "failed"
        assert "mailbox full" in result.error


class TestReplyNotification:
    """Each reply skip rule, with only that condition true."""

    def test_skipped_without_pid(self, service, transport, comment, parent_comment, notify_config):
        """Test that a top-level comment sends no reply mail."""
        result = service.notify_reply(comment, notify_config, parent_comment)

        assert result.reason == "no_parent_reference"
        assert transport.sent == []

    def test_skipped_without_parent(self, service, transport, reply_comment, notify_config):
        """Test that a missing parent record sends no reply mail."""
        result = service.notify_reply(reply_comment, notify_config, None)

        assert result.reason == "parent_missing"
        assert transport.sent == []

    def test_skipped_when_parent_is_owner(self, service, transport, reply_comment, notify_config):
        """Test that replies to the owner are left to the owner mail."""
        parent = Comment(id="c-1", nick="Owner", mail="owner@example.com")

        result = service.notify_reply(reply_comment, notify_config, parent)

        assert result.reason == "parent_is_owner"
        assert transport.sent == []

    def test_skipped_for_self_reply(self, service, transport, reply_comment, notify_config):
        """Test that replying to one's own comment sends nothing."""
        parent = Comment(id="c-1", nick="Bob", mail="Bob@Example.com")

        result = service.notify_reply(reply_comment, notify_config, parent)

        assert result.reason == "self_reply"
        assert transport.sent == []

    def test_sent_to_parent_author(self, service, transport, reply_comment, parent_comment, notify_config):
        """Test a regular reply."""
        result = service.notify_reply(reply_comment, notify_config, parent_comment)

        assert result.status == "sent"
        assert transport.sent[0]["to"] == "alice@example.com"
        assert transport.sent[0]["subject"] == "Alice，您在『My Blog』上的评论收到了回复"


class TestPushNotification:
    """Tests for push skip rules."""

    def test_skipped_without_channel(self, service, push, comment, notify_config):
        """Test that push needs both channel and token."""
        config = notify_config.model_copy(update={"pushoo_channel": "bark"})

        assert service.notify_push(comment, config).reason == "push_not_configured"
        assert push.pushes == []

    def test_skipped_for_owner(self, service, push, push_config):
        """Test that the owner's own comments are not pushed."""
        comment = Comment(id="c-3", mail="owner@example.com", href="https://x/y")

        assert service.notify_push(comment, push_config).reason == "author_is_owner"
        assert push.pushes == []

    def test_push_message(self, service, push, comment, push_config):
        """Test the pushed title, stripped content and link."""
        result = service.notify_push(comment, push_config)

        assert result.status == "sent"
        sent = push.pushes[0]
        assert sent["channel"] == "bark"
        assert sent["token"] == "device-key"
        assert sent["title"] == "My Blog有新评论了"
        assert "评论内容：hello" in sent["content"]
        assert sent["url"] == "https://blog.example.com/posts/hello#c-2"

    def test_push_failure(self, transport, comment, push_config):
        """Test that gateway errors become a failed result."""
        service = NotificationService(
            transport_lifecycle=FakeLifecycle(transport),
            push_dispatcher=FakePushDispatcher(fail_with=PushError("gateway down")),
        )

        result = service.notify_push(comment, push_config)

        assert result.status == "failed"
        assert result.error == "gateway down"


def test_owner_comment_triggers_nothing(service, transport, push, push_config):
    """Test that the owner's own comment sends neither mail nor push."""
    comment = Comment(id="c-4", nick="Owner", mail="owner@example.com", href="https://x/y", comment="hi")
    config = push_config.model_copy(update={"sc_mail_notify": True})

    results = by_channel(service.send_notice(comment, config))

    assert {r.status for r in results.values()} == {"skipped"}
    assert transport.sent == []
    assert push.pushes == []
