"""HTTP surface of the notify function.

- RequestRouter / FunctionResponse: framework-neutral action dispatch
- NotifyHandlers: postSubmit, emailTest and getQQAvatar
- create_app / build_router: FastAPI application wiring
"""

from .handlers import NotifyHandlers
from .models import InvalidRequestError
from .router import FunctionResponse, RequestRouter, cors_headers
from .server import build_router, create_app

__all__ = [
    "RequestRouter",
    "FunctionResponse",
    "NotifyHandlers",
    "InvalidRequestError",
    "cors_headers",
    "build_router",
    "create_app",
]
