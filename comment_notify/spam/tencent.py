"""Tencent Cloud text moderation (TMS) spam checker."""

import base64
import json
from typing import Any, Callable, Dict, Optional

from tencentcloud.common import credential
from tencentcloud.common.exception.tencent_cloud_sdk_exception import TencentCloudSDKException
from tencentcloud.common.profile.client_profile import ClientProfile
from tencentcloud.common.profile.http_profile import HttpProfile
from tencentcloud.tms.v20201229 import models, tms_client

from comment_notify.config.models import AdvancedConfig
from comment_notify.domain.models import Comment, NotifyConfig
from comment_notify.logging import get_logger

from .base import SpamChecker

logger = get_logger(__name__, component="spam")

PASS_SUGGESTION = "Pass"


def build_moderation_params(comment: Comment, config: NotifyConfig) -> Dict[str, Any]:
    """Build the TextModeration request parameters for a comment.

    The content is sent as base64 of its UTF-8 bytes, as the API requires.
    """
    content = (comment.comment or "").encode("utf-8")
    params: Dict[str, Any] = {
        "Content": base64.b64encode(content).decode("ascii"),
        "DataId": comment.identifier,
        "User": {"Nickname": comment.nick},
        "Device": {"IP": comment.ip},
    }
    if config.qcloud_cms_biztype:
        params["BizType"] = config.qcloud_cms_biztype
    return params


class TencentCloudChecker(SpamChecker):
    """Spam checker backed by Tencent Cloud content moderation.

    Applicable when both QCLOUD_SECRET_ID and QCLOUD_SECRET_KEY are set.
    Anything other than a "Pass" suggestion counts as spam.
    """

    name = "qcloud"

    def __init__(
        self,
        region: str = "ap-shanghai",
        endpoint: str = "tms.tencentcloudapi.com",
        client_factory: Optional[Callable[[str, str], Any]] = None,
    ) -> None:
        """
        Args:
            region: TMS region
            endpoint: TMS API endpoint
            client_factory: Builds a client from (secret_id, secret_key);
                defaults to the SDK's TmsClient
        """
        self.region = region
        self.endpoint = endpoint
        self.client_factory = client_factory or self._build_client

    @classmethod
    def from_config(cls, advanced_config: AdvancedConfig, **kwargs) -> "TencentCloudChecker":
        return cls(
            region=advanced_config.qcloud_region,
            endpoint=advanced_config.qcloud_endpoint,
            **kwargs,
        )

    def _build_client(self, secret_id: str, secret_key: str):
        http_profile = HttpProfile()
        http_profile.endpoint = self.endpoint
        client_profile = ClientProfile()
        client_profile.httpProfile = http_profile
        cred = credential.Credential(secret_id, secret_key)
        return tms_client.TmsClient(cred, self.region, client_profile)

    def is_applicable(self, config: NotifyConfig) -> bool:
        return bool(config.qcloud_secret_id and config.qcloud_secret_key)

    def check(self, comment: Comment, config: NotifyConfig) -> Optional[bool]:
        params = build_moderation_params(comment, config)
        logger.debug(
            "Submitting comment to Tencent Cloud moderation",
            extra={"event": "spam.qcloud.request", "data_id": params["DataId"]},
        )

        try:
            client = self.client_factory(config.qcloud_secret_id, config.qcloud_secret_key)
            request = models.TextModerationRequest()
            request.from_json_string(json.dumps(params))
            response = client.TextModeration(request)
        except (TencentCloudSDKException, OSError, ValueError) as e:
            logger.warning(
                f"Tencent Cloud moderation failed: {e}",
                extra={"event": "spam.qcloud.failed", "error_type": type(e).__name__},
            )
            return None

        suggestion = getattr(response, "Suggestion", None)
        logger.info(
            f"Tencent Cloud moderation suggestion: {suggestion}",
            extra={
                "event": "spam.qcloud.result",
                "suggestion": suggestion,
                "label": getattr(response, "Label", None),
            },
        )
        return suggestion != PASS_SUGGESTION
