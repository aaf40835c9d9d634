"""Unit tests for domain models."""

from comment_notify.domain.models import Comment, NotifyConfig, ResultCode


class TestComment:
    """Tests for Comment model."""

    def test_parses_stored_record(self):
        """Test that camelCase and underscore keys map onto fields."""
        comment = Comment.model_validate(
            {"_id": "doc-1", "mailMd5": "abc", "isSpam": True, "nick": "Bob"}
        )

        assert comment.doc_id == "doc-1"
        assert comment.mail_md5 == "abc"
        assert comment.is_spam is True
        assert comment.nick == "Bob"

    def test_numeric_ids_become_strings(self):
        """Test that numeric identifiers are coerced to strings."""
        comment = Comment.model_validate({"id": 42, "pid": 7})

        assert comment.id == "42"
        assert comment.pid == "7"

    def test_unknown_fields_are_kept(self):
        """Test that fields this service does not use survive parsing."""
        comment = Comment.model_validate({"id": "c-1", "created": 1700000000, "top": False})

        assert comment.model_extra == {"created": 1700000000, "top": False}

    def test_identifier_prefers_id(self):
        """Test identifier uses id, then _id."""
        assert Comment.model_validate({"id": "a", "_id": "b"}).identifier == "a"
        assert Comment.model_validate({"_id": "b"}).identifier == "b"
        assert Comment().identifier is None

    def test_is_reply(self):
        """Test is_reply follows the thread root reference."""
        assert Comment(rid="c-1").is_reply is True
        assert Comment().is_reply is False

    def test_fields_are_mutable(self):
        """Test that avatar and spam flag can be set in place."""
        comment = Comment()
        comment.avatar = "https://example.com/a.png"
        comment.is_spam = False

        assert comment.avatar == "https://example.com/a.png"
        assert comment.is_spam is False


class TestNotifyConfig:
    """Tests for NotifyConfig model."""

    def test_upper_case_keys(self):
        """Test that settings arrive upper-cased and are read lower-cased."""
        config = NotifyConfig.model_validate(
            {"SITE_NAME": "My Blog", "BLOGGER_EMAIL": "owner@example.com"}
        )

        assert config.site_name == "My Blog"
        assert config.blogger_email == "owner@example.com"

    def test_unknown_keys_are_ignored(self):
        """Test that unrelated settings do not fail validation."""
        config = NotifyConfig.model_validate({"COMMENT_PAGE_SIZE": 8, "SITE_NAME": "x"})

        assert config.site_name == "x"
        assert not hasattr(config, "comment_page_size")

    def test_defaults(self):
        """Test defaults of the boolean options."""
        config = NotifyConfig()

        assert config.smtp_secure is False
        assert config.sc_mail_notify is False
        assert config.notify_spam is True
        assert config.has_push is False

    def test_opt_in_flags_accept_strings(self):
        """Test that 'true' strings enable opt-in flags."""
        config = NotifyConfig.model_validate({"SMTP_SECURE": "true", "SC_MAIL_NOTIFY": "TRUE"})

        assert config.smtp_secure is True
        assert config.sc_mail_notify is True

    def test_opt_in_flags_ignore_other_values(self):
        """Test that anything but true leaves opt-in flags disabled."""
        config = NotifyConfig.model_validate({"SMTP_SECURE": "yes", "SC_MAIL_NOTIFY": ""})

        assert config.smtp_secure is False
        assert config.sc_mail_notify is False

    def test_notify_spam_only_disabled_by_false(self):
        """Test that notify_spam stays on unless explicitly false."""
        assert NotifyConfig.model_validate({"NOTIFY_SPAM": "false"}).notify_spam is False
        assert NotifyConfig.model_validate({"NOTIFY_SPAM": False}).notify_spam is False
        assert NotifyConfig.model_validate({"NOTIFY_SPAM": ""}).notify_spam is True
        assert NotifyConfig.model_validate({"NOTIFY_SPAM": "no"}).notify_spam is True

    def test_smtp_port_parsing(self):
        """Test that ports may be numeric strings and bad values count as unset."""
        assert NotifyConfig.model_validate({"SMTP_PORT": "465"}).smtp_port == 465
        assert NotifyConfig.model_validate({"SMTP_PORT": 587}).smtp_port == 587
        assert NotifyConfig.model_validate({"SMTP_PORT": "abc"}).smtp_port is None
        assert NotifyConfig.model_validate({"SMTP_PORT": ""}).smtp_port is None

    def test_has_push_requires_channel_and_token(self):
        """Test that push counts as configured only with both values."""
        assert NotifyConfig.model_validate({"PUSHOO_CHANNEL": "bark"}).has_push is False
        assert NotifyConfig.model_validate({"PUSHOO_TOKEN": "t"}).has_push is False
        assert (
            NotifyConfig.model_validate({"PUSHOO_CHANNEL": "bark", "PUSHOO_TOKEN": "t"}).has_push
            is True
        )


def test_result_codes():
    """Test the numeric response codes."""
    assert ResultCode.SUCCESS == 0
    assert ResultCode.FAIL == 1000
    assert ResultCode.NEED_LOGIN == 1024
    assert ResultCode.FORBIDDEN == 1403
