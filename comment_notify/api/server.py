"""FastAPI application exposing the notify function over HTTP."""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response

from comment_notify import __version__
from comment_notify.avatar.qq import QQAvatarClient
from comment_notify.config.models import ServiceConfig
from comment_notify.logging import get_logger
from comment_notify.notifications.push import PushDispatcher
from comment_notify.notifications.service import NotificationService
from comment_notify.notifications.transport import MailTransportLifecycle
from comment_notify.spam.akismet import AkismetChecker, AkismetClient
from comment_notify.spam.classifier import SpamClassifier
from comment_notify.spam.tencent import TencentCloudChecker

from .handlers import NotifyHandlers
from .router import FunctionResponse, RequestRouter

logger = get_logger(__name__, component="server")


def build_router(service_config: ServiceConfig) -> RequestRouter:
    """Wire the router with one process-wide transport lifecycle.

    Spam providers are registered in priority order: Tencent Cloud, then
    Akismet.
    """
    advanced = service_config.advanced
    lifecycle = MailTransportLifecycle(smtp_timeout=advanced.smtp_timeout)

    classifier = SpamClassifier(
        [
            TencentCloudChecker.from_config(advanced),
            AkismetChecker(AkismetClient.from_config(advanced)),
        ]
    )
    notification_service = NotificationService(
        transport_lifecycle=lifecycle,
        push_dispatcher=PushDispatcher.from_config(advanced),
    )
    handlers = NotifyHandlers(
        qq_client=QQAvatarClient.from_config(advanced),
        spam_classifier=classifier,
        notification_service=notification_service,
        transport_lifecycle=lifecycle,
    )
    return RequestRouter(handlers, internal_header=service_config.server.internal_header)


def _to_response(result: FunctionResponse) -> Response:
    return Response(
        content=result.body,
        status_code=result.status_code,
        headers=result.headers,
    )


def create_app(
    service_config: Optional[ServiceConfig] = None,
    router: Optional[RequestRouter] = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        service_config: Service settings (defaults when None)
        router: Pre-built router (built from service_config when None)

    Returns:
        Application serving POST and OPTIONS on the configured route path
    """
    service_config = service_config or ServiceConfig()
    router = router or build_router(service_config)
    route_path = service_config.server.route_path

    app = FastAPI(title="Comment Notify", version=__version__)
    app.state.router = router

    @app.post(route_path)
    async def notify(request: Request) -> Response:
        body = await request.body()
        # Handlers block on SMTP and HTTP calls; keep them off the event loop
        result = await run_in_threadpool(router.handle, "POST", dict(request.headers), body)
        return _to_response(result)

    @app.options(route_path)
    async def preflight() -> Response:
        return _to_response(router.preflight())

    logger.info(
        f"Notify function mounted at {route_path}",
        extra={"event": "server.route.mounted", "route_path": route_path},
    )
    return app
