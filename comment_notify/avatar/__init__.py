"""Avatar resolution: CDN hash URLs and QQ avatar lookups."""

from .gravatar import get_avatar
from .qq import QQAvatarClient, resolve_qq_avatar

__all__ = ["get_avatar", "QQAvatarClient", "resolve_qq_avatar"]
