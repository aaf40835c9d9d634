"""Per-request fields for structured logging.

The router binds ``request_id`` and ``action``, the fan-out binds
``comment_id``; ContextualFilter copies them onto every record emitted in
that scope. Worker threads only see them when started through
``contextvars.copy_context().run``.
"""

from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Any, Dict, Iterator

_fields: ContextVar[Dict[str, Any]] = ContextVar("comment_notify_log_fields", default={})


def get_log_context() -> Dict[str, Any]:
    """Return a copy of the fields currently bound."""
    return dict(_fields.get())


def push_log_context(**fields: Any) -> Token:
    """Bind fields on top of the current ones.

    Fields passed as None are not bound, so an unknown ``action`` does not
    show up as ``action=null`` on every line.

    Returns:
        Token for pop_log_context()
    """
    bound = {key: value for key, value in fields.items() if value is not None}
    return _fields.set({**_fields.get(), **bound})


def pop_log_context(token: Token) -> None:
    """Restore the fields bound before the matching push."""
    _fields.reset(token)


def clear_log_context() -> None:
    _fields.set({})


@contextmanager
def log_context(**fields: Any) -> Iterator[Dict[str, Any]]:
    """Bind fields for the duration of a ``with`` block.

    Example:
        >>> with log_context(request_id="3f2a9c", action="postSubmit"):
        ...     logger.info("Handling postSubmit")
    """
    token = push_log_context(**fields)
    try:
        yield get_log_context()
    finally:
        pop_log_context(token)
