"""QQ avatar lookup for commenters using a numeric QQ address."""

from typing import Optional

from comment_notify.clients.base import HTTPClient
from comment_notify.clients.exceptions import ClientError
from comment_notify.config.models import AdvancedConfig
from comment_notify.domain.models import Comment
from comment_notify.logging import get_logger
from comment_notify.utils.mail import is_qq, qq_number

logger = get_logger(__name__, component="avatar")


class QQAvatarClient(HTTPClient):
    """Client for the public QQ avatar endpoint.

    API Details:
        Endpoint: https://aq.qq.com/cn2/get_img/get_face
        Method: GET
        Query: img_type=3, uin=<QQ number>
        Response: JSON object whose 'url' field is the avatar image
    """

    DEFAULT_ENDPOINT = "https://aq.qq.com/cn2/get_img/get_face"

    def __init__(self, endpoint: str = DEFAULT_ENDPOINT, **kwargs) -> None:
        super().__init__(**kwargs)
        self.endpoint = endpoint

    @classmethod
    def from_config(cls, advanced_config: AdvancedConfig, **kwargs):
        return super().from_config(
            advanced_config, endpoint=advanced_config.qq_avatar_endpoint, **kwargs
        )

    def get_avatar(self, qq: str) -> Optional[str]:
        """Look up the avatar URL of a QQ account.

        Args:
            qq: QQ number, with or without the @qq.com suffix

        Returns:
            Avatar URL, or None when the lookup failed or returned nothing
        """
        uin = qq_number(qq)
        try:
            data = self._make_request(self.endpoint, params={"img_type": 3, "uin": uin})
        except ClientError as e:
            logger.warning(
                f"QQ avatar lookup failed for {uin}: {e}",
                extra={"event": "avatar.qq.failed", "error_type": type(e).__name__},
            )
            return None

        url = data.get("url") if isinstance(data, dict) else None
        return url or None


def resolve_qq_avatar(comment: Comment, client: QQAvatarClient) -> Optional[str]:
    """Store the QQ avatar on a comment that has none yet.

    Only applies to comments without an avatar whose email is a QQ address;
    a failed lookup leaves the comment unchanged.

    Returns:
        The avatar that was stored, or None
    """
    if comment.avatar or not is_qq(comment.mail):
        return None

    avatar = client.get_avatar(qq_number(comment.mail))
    if avatar:
        comment.avatar = avatar
        logger.info(
            "Resolved QQ avatar",
            extra={"event": "avatar.qq.resolved", "avatar": avatar},
        )
    return avatar
