"""Hashing of commenter identities for avatar CDN lookups.

Avatar CDNs key images by a hash of the normalized email address:
- cravatar.cn expects MD5
- weavatar.com, gravatar.com and the rest accept SHA-256
Commenters without an email are hashed by nickname so they still get a
stable identicon.
"""

import hashlib

from comment_notify.domain.models import Comment

from .mail import normalize_mail


def md5_hex(value: str) -> str:
    """Hex MD5 digest of a UTF-8 string."""
    return hashlib.md5(value.encode("utf-8")).hexdigest()


def sha256_hex(value: str) -> str:
    """Hex SHA-256 digest of a UTF-8 string."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def mail_md5(comment: Comment) -> str:
    """MD5 identity hash of a commenter.

    Prefers the precomputed ``mailMd5`` stored with the comment, then the
    normalized email, then the nickname.
    """
    if comment.mail_md5:
        return comment.mail_md5
    if comment.mail:
        return md5_hex(normalize_mail(comment.mail))
    return md5_hex(comment.nick or "")


def mail_sha256(comment: Comment) -> str:
    """SHA-256 identity hash of a commenter (normalized email, else nickname)."""
    if comment.mail:
        return sha256_hex(normalize_mail(comment.mail))
    return sha256_hex(comment.nick or "")
