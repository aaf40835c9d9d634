"""Comment notification dispatcher.

Receives post-submit events from a comment widget backend, checks comments for
spam, resolves commenter avatars and fans out owner/reply/push notifications.
"""

__version__ = "1.0.0"
