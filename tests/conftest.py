"""Shared fixtures for the comment notification tests."""

import pytest

from comment_notify.domain.models import Comment, NotifyConfig
from comment_notify.logging.context import clear_log_context

ENV_VARS = ("LOG_LEVEL", "LOG_FORMAT", "ENVIRONMENT", "HOST", "PORT")


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every environment variable the service reads."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture(autouse=True)
def clean_context():
    """Clear logging context before and after each test."""
    clear_log_context()
    yield
    clear_log_context()


@pytest.fixture
def comment():
    """A top-level comment by a visitor."""
    return Comment.model_validate(
        {
            "id": "c-2",
            "nick": "Bob",
            "mail": "bob@example.com",
            "ip": "203.0.113.7",
            "ua": "Mozilla/5.0",
            "link": "https://bob.example.com",
            "href": "https://blog.example.com/posts/hello#old",
            "url": "/posts/hello",
            "comment": "<p>hello</p>",
        }
    )


@pytest.fixture
def reply_comment():
    """A reply by Bob to Alice's comment c-1."""
    return Comment.model_validate(
        {
            "id": "c-2",
            "nick": "Bob",
            "mail": "bob@example.com",
            "href": "https://blog.example.com/posts/hello",
            "comment": "<p>I agree</p>",
            "pid": "c-1",
            "rid": "c-1",
        }
    )


@pytest.fixture
def parent_comment():
    """Alice's comment that Bob replies to."""
    return Comment.model_validate(
        {
            "id": "c-1",
            "nick": "Alice",
            "mail": "alice@example.com",
            "comment": "<p>first!</p>",
        }
    )


@pytest.fixture
def notify_config():
    """Site settings with working SMTP and no push channel."""
    return NotifyConfig.model_validate(
        {
            "SITE_NAME": "My Blog",
            "SITE_URL": "https://blog.example.com",
            "BLOGGER_EMAIL": "owner@example.com",
            "SENDER_NAME": "My Blog",
            "SENDER_EMAIL": "noreply@example.com",
            "SMTP_SERVICE": "qq",
            "SMTP_USER": "noreply@example.com",
            "SMTP_PASS": "secret",
        }
    )
