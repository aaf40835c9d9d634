"""Common interface for spam-check providers."""

from abc import ABC, abstractmethod
from typing import Optional

from comment_notify.domain.models import Comment, NotifyConfig


class SpamCheckError(Exception):
    """A spam-check provider could not produce a verdict."""

    pass


class SpamChecker(ABC):
    """A spam-check provider selected by the credentials present in the settings.

    Implementations must not mutate the comment; the classifier stores the
    verdict.
    """

    name: str = "base"

    @abstractmethod
    def is_applicable(self, config: NotifyConfig) -> bool:
        """Whether the settings hold the credentials this provider needs."""

    @abstractmethod
    def check(self, comment: Comment, config: NotifyConfig) -> Optional[bool]:
        """Classify a comment.

        Returns:
            True for spam, False for ham, None when no verdict was reached

        Raises:
            SpamCheckError: If the provider failed in a way the caller must see
        """
