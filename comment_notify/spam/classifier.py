"""Spam classification with an ordered cascade of providers."""

from typing import List, Optional, Sequence

from comment_notify.domain.models import Comment, NotifyConfig
from comment_notify.logging import get_logger
from comment_notify.utils.mail import equals_mail

from .base import SpamChecker, SpamCheckError

logger = get_logger(__name__, component="spam")


class SpamClassifier:
    """Decides whether a comment is spam.

    Decision order (first match wins):
    1. A comment already flagged as spam stays spam; no provider is called
    2. Comments by the site owner are never spam
    3. The first provider whose credentials are configured decides
    4. Otherwise the verdict is undetermined (None)

    Only the first applicable provider is consulted, even when it fails to
    reach a verdict. Errors never escape classify().
    """

    def __init__(self, checkers: Optional[Sequence[SpamChecker]] = None):
        """
        Args:
            checkers: Providers in priority order
        """
        self.checkers: List[SpamChecker] = list(checkers or [])

    def select_checker(self, config: NotifyConfig) -> Optional[SpamChecker]:
        """Return the highest-priority provider configured in ``config``."""
        for checker in self.checkers:
            if checker.is_applicable(config):
                return checker
        return None

    def classify(self, comment: Comment, config: NotifyConfig) -> Optional[bool]:
        """Classify a comment.

        Returns:
            True for spam, False for not spam, None when undetermined
        """
        try:
            if comment.is_spam:
                is_spam = True
                source = "flag"
            elif equals_mail(config.blogger_email, comment.mail):
                is_spam = False
                source = "owner"
            else:
                checker = self.select_checker(config)
                if checker is None:
                    is_spam = None
                    source = "none"
                else:
                    source = checker.name
                    is_spam = checker.check(comment, config)

            logger.info(
                f"Spam check result: {is_spam}",
                extra={"event": "spam.check.result", "is_spam": is_spam, "source": source},
            )
            return is_spam

        except SpamCheckError as e:
            logger.warning(
                f"Spam check provider failed: {e}",
                extra={"event": "spam.check.failed", "error_type": type(e).__name__},
            )
            return None
        except Exception as e:
            logger.error(
                f"Spam check failed: {e}",
                exc_info=True,
                extra={"event": "spam.check.failed", "error_type": type(e).__name__},
            )
            return None
