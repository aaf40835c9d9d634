"""Instant-message push to chat bots and push services.

The site configures a channel name (PUSHOO_CHANNEL) and a channel-specific
token (PUSHOO_TOKEN). Each channel is one HTTP call; the token format per
channel is documented on the sender method.
"""

from typing import Callable, Dict, List, Optional
from urllib.parse import quote

from comment_notify.clients.base import HTTPClient
from comment_notify.clients.exceptions import ClientError
from comment_notify.logging import get_logger

from .models import PushError

logger = get_logger(__name__, component="push")


class PushDispatcher(HTTPClient):
    """Sends a titled markdown message to one of the supported channels."""

    BARK_SERVER = "https://api.day.app"
    SERVERCHAN_URL = "https://sctapi.ftqq.com/{key}.send"
    PUSHPLUS_URL = "https://www.pushplus.plus/send"
    PUSHDEER_URL = "https://api2.pushdeer.com/message/push"
    DINGTALK_URL = "https://oapi.dingtalk.com/robot/send"
    WECOMBOT_URL = "https://qyapi.weixin.qq.com/cgi-bin/webhook/send"
    FEISHU_URL = "https://open.feishu.cn/open-apis/bot/v2/hook/{token}"
    TELEGRAM_URL = "https://api.telegram.org/bot{token}/sendMessage"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._senders: Dict[str, Callable[[str, str, str, Optional[str]], object]] = {
            "bark": self._send_bark,
            "serverchan": self._send_serverchan,
            "pushplus": self._send_pushplus,
            "pushdeer": self._send_pushdeer,
            "dingtalk": self._send_dingtalk,
            "wecombot": self._send_wecombot,
            "feishu": self._send_feishu,
            "telegram": self._send_telegram,
            "discord": self._send_discord,
            "webhook": self._send_webhook,
        }

    def supported_channels(self) -> List[str]:
        return sorted(self._senders)

    def send(
        self,
        channel: str,
        token: str,
        title: str,
        content: str,
        url: Optional[str] = None,
    ):
        """Deliver one message.

        Args:
            channel: Channel name (case-insensitive)
            token: Channel-specific token
            title: Message title
            content: Markdown message body
            url: Link opened when the notification is tapped, where supported

        Returns:
            The channel's parsed response body

        Raises:
            PushError: If the channel is unknown, the token is malformed or
                the request fails
        """
        name = (channel or "").strip().lower()
        sender = self._senders.get(name)
        if sender is None:
            raise PushError(
                f"Unsupported push channel: '{channel}'. "
                f"Supported: {', '.join(self.supported_channels())}"
            )
        if not token or not token.strip():
            raise PushError(f"Push token for channel '{name}' is empty")

        try:
            result = sender(token.strip(), title, content, url)
        except ClientError as e:
            raise PushError(f"Push via {name} failed: {e}") from e

        logger.info(
            f"Push sent via {name}",
            extra={"event": "push.send.success", "channel": name},
        )
        return result

    def _send_bark(self, token, title, content, url):
        """Token: device key, or a full server URL ending in the device key."""
        if token.startswith("http://") or token.startswith("https://"):
            server, _, device_key = token.rstrip("/").rpartition("/")
        else:
            server, device_key = self.BARK_SERVER, token
        payload = {"device_key": device_key, "title": title, "body": content}
        if url:
            payload["url"] = url
        return self._make_request(f"{server}/push", method="POST", json_data=payload)

    def _send_serverchan(self, token, title, content, url):
        """Token: ServerChan SendKey."""
        return self._make_request(
            self.SERVERCHAN_URL.format(key=quote(token, safe="")),
            method="POST",
            form_data={"title": title, "desp": content},
        )

    def _send_pushplus(self, token, title, content, url):
        """Token: PushPlus user token."""
        return self._make_request(
            self.PUSHPLUS_URL,
            method="POST",
            json_data={"token": token, "title": title, "content": content, "template": "markdown"},
        )

    def _send_pushdeer(self, token, title, content, url):
        """Token: PushDeer push key."""
        return self._make_request(
            self.PUSHDEER_URL,
            method="POST",
            form_data={"pushkey": token, "text": title, "desp": content, "type": "markdown"},
        )

    def _send_dingtalk(self, token, title, content, url):
        """Token: robot access_token."""
        return self._make_request(
            self.DINGTALK_URL,
            method="POST",
            params={"access_token": token},
            json_data={"msgtype": "markdown", "markdown": {"title": title, "text": f"## {title}\n\n{content}"}},
        )

    def _send_wecombot(self, token, title, content, url):
        """Token: group robot webhook key."""
        return self._make_request(
            self.WECOMBOT_URL,
            method="POST",
            params={"key": token},
            json_data={"msgtype": "markdown", "markdown": {"content": f"## {title}\n\n{content}"}},
        )

    def _send_feishu(self, token, title, content, url):
        """Token: bot hook token (the last path segment of the webhook URL)."""
        return self._make_request(
            self.FEISHU_URL.format(token=quote(token, safe="")),
            method="POST",
            json_data={"msg_type": "text", "content": {"text": f"{title}\n\n{content}"}},
        )

    def _send_telegram(self, token, title, content, url):
        """Token: ``<bot token>#<chat id>``."""
        bot_token, separator, chat_id = token.partition("#")
        if not separator or not bot_token or not chat_id:
            raise PushError("Telegram token must look like '<bot token>#<chat id>'")
        return self._make_request(
            self.TELEGRAM_URL.format(token=bot_token),
            method="POST",
            json_data={"chat_id": chat_id, "text": f"*{title}*\n\n{content}", "parse_mode": "Markdown"},
        )

    def _send_discord(self, token, title, content, url):
        """Token: full webhook URL."""
        self._require_url(token, "discord")
        # Discord answers 204 with no body unless asked to wait
        return self._make_request(
            token,
            method="POST",
            params={"wait": "true"},
            json_data={"content": f"**{title}**\n\n{content}"},
        )

    def _send_webhook(self, token, title, content, url):
        """Token: full URL receiving a JSON ``{title, content, url}`` POST."""
        self._require_url(token, "webhook")
        return self._make_request(
            token,
            method="POST",
            json_data={"title": title, "content": content, "url": url},
            expect_json=False,
        )

    @staticmethod
    def _require_url(token: str, channel: str) -> None:
        if not (token.startswith("https://") or token.startswith("http://")):
            raise PushError(f"Token for channel '{channel}' must be a webhook URL")
