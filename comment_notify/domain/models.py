"""Core domain models for comments and per-request notification settings.

This module defines the records handed over by the comment-storage layer:
- Comment: a submitted comment (also used for the parent comment of a reply)
- NotifyConfig: the site's notification settings, supplied with every request
- ResultCode: numeric codes carried by every response body
"""

from enum import IntEnum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ResultCode(IntEnum):
    """Response codes understood by the comment widget backend."""

    SUCCESS = 0
    FAIL = 1000
    NEED_LOGIN = 1024
    FORBIDDEN = 1403


def _coerce_flag(value: Any, default: bool) -> bool:
    """Interpret a stored flag that may be a JSON boolean or a 'true'/'false' string.

    Only the value opposite to ``default`` flips the result; anything else
    (missing, empty, unrecognised) keeps the default.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if default and normalized == "false":
            return False
        if not default and normalized == "true":
            return True
    return default


class Comment(BaseModel):
    """A comment record as stored by the widget backend.

    Mutated in place by avatar resolution (``avatar``) and spam
    classification (``is_spam``); this service never persists it.
    Unknown fields are kept so the record round-trips unchanged.
    """

    id: Optional[str] = Field(None, description="Comment identifier")
    doc_id: Optional[str] = Field(None, alias="_id", description="Storage document id")
    nick: Optional[str] = Field(None, description="Commenter nickname")
    mail: Optional[str] = Field(None, description="Commenter email")
    mail_md5: Optional[str] = Field(None, alias="mailMd5", description="MD5 of the email")
    link: Optional[str] = Field(None, description="Commenter website")
    ua: Optional[str] = Field(None, description="Commenter user agent")
    ip: Optional[str] = Field(None, description="Commenter IP address")
    url: Optional[str] = Field(None, description="Page path relative to the site URL")
    href: Optional[str] = Field(None, description="Absolute page URL")
    comment: Optional[str] = Field(None, description="Comment body (HTML)")
    pid: Optional[str] = Field(None, description="Id of the comment being replied to")
    rid: Optional[str] = Field(None, description="Id of the thread root comment")
    avatar: Optional[str] = Field(None, description="Avatar image URL")
    is_spam: Optional[bool] = Field(None, alias="isSpam", description="Spam flag")

    model_config = ConfigDict(
        populate_by_name=True,
        extra="allow",
        coerce_numbers_to_str=True,
    )

    @property
    def identifier(self) -> Optional[str]:
        """Identifier used as the permalink fragment."""
        return self.id or self.doc_id

    @property
    def is_reply(self) -> bool:
        return bool(self.rid)


class NotifyConfig(BaseModel):
    """Notification settings of one site.

    Keys arrive upper-cased (``SMTP_USER``, ``BLOGGER_EMAIL``...) and are
    exposed as lower-case attributes. Unrecognised keys are ignored.
    """

    site_name: Optional[str] = None
    site_url: Optional[str] = None
    blogger_email: Optional[str] = None
    sender_name: Optional[str] = None
    sender_email: Optional[str] = None

    smtp_service: Optional[str] = None
    smtp_host: Optional[str] = None
    smtp_port: Optional[int] = None
    smtp_secure: bool = False
    smtp_user: Optional[str] = None
    smtp_pass: Optional[str] = None

    mail_subject: Optional[str] = None
    mail_subject_admin: Optional[str] = None
    mail_template: Optional[str] = None
    mail_template_admin: Optional[str] = None

    gravatar_cdn: Optional[str] = None
    default_gravatar: Optional[str] = None

    qcloud_secret_id: Optional[str] = None
    qcloud_secret_key: Optional[str] = None
    qcloud_cms_biztype: Optional[str] = None
    akismet_key: Optional[str] = None

    pushoo_channel: Optional[str] = None
    pushoo_token: Optional[str] = None
    sc_mail_notify: bool = Field(False, description="Also email the owner when push is configured")
    notify_spam: bool = Field(True, description="Notify about comments flagged as spam")

    model_config = ConfigDict(
        alias_generator=str.upper,
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )

    @field_validator("smtp_secure", "sc_mail_notify", mode="before")
    @classmethod
    def parse_opt_in_flag(cls, v: Any) -> bool:
        return _coerce_flag(v, default=False)

    @field_validator("notify_spam", mode="before")
    @classmethod
    def parse_opt_out_flag(cls, v: Any) -> bool:
        return _coerce_flag(v, default=True)

    @field_validator("smtp_port", mode="before")
    @classmethod
    def parse_port(cls, v: Any) -> Optional[int]:
        """Accept numeric strings; anything unparsable counts as unset."""
        if v is None or isinstance(v, bool):
            return None
        if isinstance(v, int):
            return v
        try:
            return int(str(v).strip())
        except ValueError:
            return None

    @property
    def has_push(self) -> bool:
        """Whether an instant-message channel is fully configured."""
        return bool(self.pushoo_channel and self.pushoo_token)
