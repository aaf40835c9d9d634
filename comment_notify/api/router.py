"""Framework-neutral request router for the notify function.

The router turns one HTTP request (method, headers, raw body) into one
FunctionResponse. It only accepts calls from a trusted co-located caller
that sets the internal marker header; everything else gets FORBIDDEN.
"""

import json
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Union

from comment_notify.domain.models import ResultCode
from comment_notify.logging import get_logger
from comment_notify.logging.context import log_context

from .handlers import NotifyHandlers
from .models import InvalidRequestError

logger = get_logger(__name__, component="router")

DEFAULT_INTERNAL_HEADER = "X-Twikoo-Internal"


@dataclass
class FunctionResponse:
    """HTTP response produced by the router."""

    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = ""

    def json(self) -> Any:
        return json.loads(self.body) if self.body else None


def cors_headers(internal_header: str = DEFAULT_INTERNAL_HEADER) -> Dict[str, str]:
    """Headers carried by every response, including preflight answers."""
    return {
        "Content-Type": "application/json; charset=UTF-8",
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Methods": "POST, OPTIONS",
        "Access-Control-Allow-Headers": f"Content-Type, {internal_header}",
        "Access-Control-Max-Age": "600",
    }


class RequestRouter:
    """Dispatches ``{action, data}`` requests to the action handlers.

    Responses always use status 200 with a ``code`` in the body, except the
    empty 204 preflight answer.
    """

    def __init__(self, handlers: NotifyHandlers, internal_header: str = DEFAULT_INTERNAL_HEADER):
        """
        Args:
            handlers: Action handlers
            internal_header: Header a trusted caller sets to ``true``
        """
        self.handlers = handlers
        self.internal_header = internal_header
        self._actions: Dict[str, Callable[[Any], Dict[str, Any]]] = {
            "postSubmit": handlers.post_submit,
            "emailTest": handlers.email_test,
            "getQQAvatar": handlers.get_qq_avatar,
        }

    def is_internal(self, headers: Optional[Mapping[str, str]]) -> bool:
        """Whether the marker header is present and exactly ``true``."""
        wanted = self.internal_header.lower()
        for name, value in (headers or {}).items():
            if name.lower() == wanted:
                return str(value).strip() == "true"
        return False

    def _respond(self, body: Optional[Dict[str, Any]], status_code: int = 200) -> FunctionResponse:
        payload = "" if body is None else json.dumps(body, ensure_ascii=False, default=str)
        return FunctionResponse(
            status_code=status_code,
            headers=cors_headers(self.internal_header),
            body=payload,
        )

    def preflight(self) -> FunctionResponse:
        """Answer a CORS preflight request."""
        return self._respond(None, status_code=204)

    def handle(
        self,
        method: str,
        headers: Optional[Mapping[str, str]],
        body: Union[bytes, str, Mapping[str, Any], None],
    ) -> FunctionResponse:
        """Handle one request.

        Args:
            method: HTTP method
            headers: Request headers (any casing)
            body: Raw JSON body, or an already decoded mapping

        Returns:
            FunctionResponse with a JSON body carrying a ResultCode
        """
        if method.upper() == "OPTIONS":
            return self.preflight()

        if not self.is_internal(headers):
            logger.warning(
                "Rejected request without internal marker header",
                extra={"event": "router.request.forbidden"},
            )
            return self._respond(
                {"code": ResultCode.FORBIDDEN, "message": "direct access is forbidden"}
            )

        request_id = uuid.uuid4().hex[:12]
        try:
            request = self._decode(body)
            raw_action = request.get("action")
            action = raw_action if isinstance(raw_action, str) else None
            with log_context(request_id=request_id, action=action):
                handler = self._actions.get(action)
                if handler is None:
                    logger.warning(
                        f"Unknown action: {raw_action!r}",
                        extra={"event": "router.request.unknown_action"},
                    )
                    return self._respond({"code": ResultCode.FAIL, "message": "unknown operation"})

                logger.info(
                    f"Handling {action}",
                    extra={"event": "router.request.received"},
                )
                result = handler(request.get("data"))
                return self._respond(result)

        except InvalidRequestError as e:
            logger.warning(
                f"Invalid request: {e}",
                extra={"event": "router.request.invalid", "request_id": request_id},
            )
            return self._respond({"code": ResultCode.FAIL, "message": str(e)})
        except Exception as e:
            logger.error(
                f"Request handling failed: {e}",
                exc_info=True,
                extra={
                    "event": "router.request.failed",
                    "request_id": request_id,
                    "error_type": type(e).__name__,
                },
            )
            return self._respond({"code": ResultCode.FAIL, "message": str(e)})

    @staticmethod
    def _decode(body: Union[bytes, str, Mapping[str, Any], None]) -> Dict[str, Any]:
        """Decode the request body into a mapping.

        Raises:
            InvalidRequestError: If the body is not a JSON object
        """
        if isinstance(body, Mapping):
            return dict(body)
        if isinstance(body, bytes):
            body = body.decode("utf-8")
        if not body:
            raise InvalidRequestError("Request body is empty")
        try:
            decoded = json.loads(body)
        except json.JSONDecodeError as e:
            raise InvalidRequestError(f"Request body is not valid JSON: {e.msg}") from e
        if not isinstance(decoded, dict):
            raise InvalidRequestError("Request body must be a JSON object")
        return decoded
