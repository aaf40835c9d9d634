"""Request payloads of the notify function's actions."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from comment_notify.domain.models import Comment, NotifyConfig


class InvalidRequestError(ValueError):
    """Raised when an action's payload does not have the expected shape."""


class PostSubmitRequest(BaseModel):
    """``postSubmit`` data: the stored comment plus its site settings."""

    comment: Comment
    config: NotifyConfig = Field(default_factory=NotifyConfig)
    parent_comment: Optional[Comment] = Field(None, alias="parentComment")

    model_config = ConfigDict(populate_by_name=True)


class EmailTestRequest(BaseModel):
    """``emailTest`` data: who to send the test mail to, and whether the caller is an admin."""

    event: Dict[str, Any] = Field(default_factory=dict)
    config: NotifyConfig = Field(default_factory=NotifyConfig)
    is_admin: bool = Field(False, alias="isAdmin")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("event", mode="before")
    @classmethod
    def default_event(cls, v: Any) -> Any:
        return v if v is not None else {}

    @field_validator("is_admin", mode="before")
    @classmethod
    def strict_admin_flag(cls, v: Any) -> bool:
        # Only a literal true grants admin rights
        return v is True


class QQAvatarRequest(BaseModel):
    """``getQQAvatar`` data."""

    mail: Optional[str] = None

    model_config = ConfigDict(coerce_numbers_to_str=True)


def parse_request(model, data: Any):
    """Validate an action payload.

    Raises:
        InvalidRequestError: With a one-line summary of the first problem
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise InvalidRequestError("Request data must be a JSON object")
    try:
        return model.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"]) or "data"
        raise InvalidRequestError(f"Invalid request data at '{location}': {first['msg']}") from e
