"""Akismet spam checker."""

from typing import Dict, Optional

from comment_notify.clients.base import HTTPClient
from comment_notify.clients.exceptions import ClientError, ClientResponseError
from comment_notify.config.models import AdvancedConfig
from comment_notify.domain.models import Comment, NotifyConfig
from comment_notify.logging import get_logger

from .base import SpamChecker, SpamCheckError

logger = get_logger(__name__, component="spam")


class AkismetClient(HTTPClient):
    """Client for the Akismet REST API.

    API Details:
        Key check:     POST https://rest.akismet.com/1.1/verify-key
        Comment check: POST https://<key>.rest.akismet.com/1.1/comment-check
        Body: form-encoded; responses are plain text
    """

    API_VERSION = "1.1"

    def __init__(self, host: str = "rest.akismet.com", **kwargs) -> None:
        super().__init__(**kwargs)
        self.host = host

    @classmethod
    def from_config(cls, advanced_config: AdvancedConfig, **kwargs):
        return super().from_config(advanced_config, host=advanced_config.akismet_endpoint, **kwargs)

    def verify_key(self, key: str, blog: Optional[str]) -> bool:
        """Check that an API key is valid for a site."""
        url = f"https://{self.host}/{self.API_VERSION}/verify-key"
        body = self._make_request(
            url,
            method="POST",
            form_data={"key": key, "blog": blog or ""},
            expect_json=False,
        )
        return body == "valid"

    def comment_check(self, key: str, payload: Dict[str, str]) -> bool:
        """Ask Akismet whether a comment is spam.

        Raises:
            ClientResponseError: If the answer is neither "true" nor "false"
        """
        url = f"https://{key}.{self.host}/{self.API_VERSION}/comment-check"
        body = self._make_request(url, method="POST", form_data=payload, expect_json=False)
        if body == "true":
            return True
        if body == "false":
            return False
        raise ClientResponseError(f"Unexpected Akismet comment-check response: {body!r}")


def build_check_payload(comment: Comment, config: NotifyConfig) -> Dict[str, str]:
    """Form fields describing a comment for comment-check; empty fields are dropped."""
    payload = {
        "blog": config.site_url,
        "user_ip": comment.ip,
        "user_agent": comment.ua,
        "permalink": comment.href,
        "comment_type": "reply" if comment.is_reply else "comment",
        "comment_author": comment.nick,
        "comment_author_email": comment.mail,
        "comment_author_url": comment.link,
        "comment_content": comment.comment,
    }
    return {key: value for key, value in payload.items() if value}


class AkismetChecker(SpamChecker):
    """Spam checker backed by Akismet.

    Applicable when AKISMET_KEY is set. The key is verified before every
    check; an invalid key ends classification without a verdict.
    """

    name = "akismet"

    def __init__(self, client: Optional[AkismetClient] = None) -> None:
        self.client = client or AkismetClient()

    def is_applicable(self, config: NotifyConfig) -> bool:
        return bool(config.akismet_key)

    def check(self, comment: Comment, config: NotifyConfig) -> Optional[bool]:
        try:
            if not self.client.verify_key(config.akismet_key, config.site_url):
                logger.warning(
                    "Akismet key is not valid for this site",
                    extra={"event": "spam.akismet.invalid_key", "site_url": config.site_url},
                )
                return None

            is_spam = self.client.comment_check(
                config.akismet_key, build_check_payload(comment, config)
            )
        except ClientError as e:
            raise SpamCheckError(f"Akismet request failed: {e}") from e

        logger.info(
            f"Akismet verdict: {is_spam}",
            extra={"event": "spam.akismet.result", "is_spam": is_spam},
        )
        return is_spam
