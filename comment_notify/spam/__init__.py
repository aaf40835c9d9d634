"""Spam classification for submitted comments.

- SpamClassifier: ordered provider cascade with owner/flag short-circuits
- TencentCloudChecker: Tencent Cloud text moderation
- AkismetChecker / AkismetClient: Akismet REST API
"""

from .akismet import AkismetChecker, AkismetClient
from .base import SpamChecker, SpamCheckError
from .classifier import SpamClassifier
from .tencent import TencentCloudChecker

__all__ = [
    "SpamClassifier",
    "SpamChecker",
    "SpamCheckError",
    "TencentCloudChecker",
    "AkismetChecker",
    "AkismetClient",
]
