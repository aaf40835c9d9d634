"""Placeholder values for notification mails and pushes.

Each builder returns a flat mapping keyed by the placeholder names users put
in their templates (``${NICK}``, ``${POST_URL}``...). Missing values become
empty strings so both literal substitution and the Jinja2 layouts render
without gaps.
"""

from typing import Dict, Optional

from comment_notify.avatar.gravatar import get_avatar
from comment_notify.domain.models import Comment, NotifyConfig
from comment_notify.utils.text import append_hash_to_url, strip_html


def _text(value: Optional[str]) -> str:
    return value if value is not None else ""


def build_permalink(comment: Comment, config: NotifyConfig) -> str:
    """URL of the page with a fragment pointing at the comment itself.

    Uses the comment's absolute ``href`` when present, else SITE_URL joined
    with the relative ``url``; any existing fragment is replaced.
    """
    page_url = comment.href or f"{_text(config.site_url)}{_text(comment.url)}"
    return append_hash_to_url(page_url, comment.identifier)


def build_owner_context(comment: Comment, config: NotifyConfig) -> Dict[str, str]:
    """Values for the new-comment mail sent to the site owner."""
    return {
        "SITE_URL": _text(config.site_url),
        "SITE_NAME": _text(config.site_name),
        "NICK": _text(comment.nick),
        "IMG": get_avatar(comment, config),
        "IP": _text(comment.ip),
        "MAIL": _text(comment.mail),
        "COMMENT": _text(comment.comment),
        "POST_URL": build_permalink(comment, config),
    }


def build_reply_context(
    comment: Comment, parent_comment: Comment, config: NotifyConfig
) -> Dict[str, str]:
    """Values for the reply mail sent to the author of the parent comment."""
    return {
        "IMG": get_avatar(comment, config),
        "PARENT_IMG": get_avatar(parent_comment, config),
        "SITE_URL": _text(config.site_url),
        "SITE_NAME": _text(config.site_name),
        "PARENT_NICK": _text(parent_comment.nick),
        "PARENT_COMMENT": _text(parent_comment.comment),
        "NICK": _text(comment.nick),
        "COMMENT": _text(comment.comment),
        "POST_URL": build_permalink(comment, config),
    }


def build_push_context(comment: Comment, config: NotifyConfig) -> Dict[str, str]:
    """Values for the instant-message push; the comment body is plain text."""
    return {
        "SITE_URL": _text(config.site_url),
        "SITE_NAME": _text(config.site_name),
        "NICK": _text(comment.nick),
        "MAIL": _text(comment.mail),
        "IP": _text(comment.ip),
        "COMMENT": strip_html(comment.comment),
        "POST_URL": build_permalink(comment, config),
    }
