"""Domain models shared by the router, classifiers and notifiers."""

from .models import Comment, NotifyConfig, ResultCode

__all__ = ["Comment", "NotifyConfig", "ResultCode"]
