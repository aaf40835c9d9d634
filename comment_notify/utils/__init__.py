"""Utility functions for mail identity, hashing and text handling."""

from .hashing import mail_md5, mail_sha256, md5_hex, sha256_hex
from .mail import equals_mail, is_qq, normalize_mail, qq_number
from .text import append_hash_to_url, strip_html

__all__ = [
    # Mail identity
    "normalize_mail",
    "equals_mail",
    "is_qq",
    "qq_number",
    # Hashing
    "md5_hex",
    "sha256_hex",
    "mail_md5",
    "mail_sha256",
    # Text
    "append_hash_to_url",
    "strip_html",
]
