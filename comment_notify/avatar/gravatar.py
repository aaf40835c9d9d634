"""Avatar URLs derived from a hash of the commenter's identity."""

from comment_notify.domain.models import Comment, NotifyConfig
from comment_notify.utils.hashing import mail_md5, mail_sha256

DEFAULT_GRAVATAR_CDN = "weavatar.com"

# The only CDN that still keys avatars by MD5
MD5_GRAVATAR_CDN = "cravatar.cn"


def get_avatar(comment: Comment, config: NotifyConfig) -> str:
    """Avatar image URL for a commenter.

    An avatar already stored on the comment wins. Otherwise the URL points at
    the configured Gravatar-compatible CDN, with ``DEFAULT_GRAVATAR`` (or a
    nickname initials image) as the fallback for unknown hashes.

    Args:
        comment: Comment whose author needs an avatar
        config: Site notification settings (GRAVATAR_CDN, DEFAULT_GRAVATAR)

    Returns:
        Absolute avatar URL
    """
    if comment.avatar:
        return comment.avatar

    gravatar_cdn = config.gravatar_cdn or DEFAULT_GRAVATAR_CDN
    default_gravatar = config.default_gravatar or f"initials&name={comment.nick or ''}"

    if gravatar_cdn == MD5_GRAVATAR_CDN:
        mail_hash = mail_md5(comment)
    else:
        mail_hash = mail_sha256(comment)

    return f"https://{gravatar_cdn}/avatar/{mail_hash}?d={default_gravatar}"
