"""Minimal Telegram Bot API client."""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Optional

API_URL = "https://api.telegram.org"
DEFAULT_TIMEOUT = 10.0


class TelegramError(Exception):
    """Raised when a message cannot be delivered."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class TelegramClient:
    """Sends text messages through the Telegram Bot API."""

    def __init__(
        self,
        token: str,
        api_url: str = API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.token = token
        self.api_url = api_url
        self.timeout = timeout
        self.logger = logger if logger is not None else logging.getLogger(__name__)

    def _log(self, msg: str, *args: object) -> None:
        if self.logger is not None:
            self.logger.info(msg, *args)

    def send_message(self, chat_id: int, text: str) -> None:
        """Send ``text`` to ``chat_id``; raise :class:`TelegramError` on failure."""
        url = f"{self.api_url}/bot{self.token}/sendMessage"
        form = urllib.parse.urlencode({"chat_id": str(chat_id), "text": text})
        try:
            request = urllib.request.Request(
                url,
                data=form.encode("utf-8"),
                method="POST",
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        except ValueError as exc:
            raise TelegramError(f"new request: {exc}") from exc

        self._log("send telegram message chat_id=%s", chat_id)

        timeout = self.timeout if self.timeout and self.timeout > 0 else None
        try:
            with urllib.request.urlopen(request, timeout=timeout) as response:
                status = response.status
                body = response.read()
        except urllib.error.HTTPError as exc:
            status = exc.code
            try:
                body = exc.read()
            except OSError as read_exc:
                raise TelegramError(f"read body: {read_exc}", status) from read_exc
        except (urllib.error.URLError, OSError) as exc:
            raise TelegramError(f"send message: {exc}") from exc

        if status >= 400:
            text_body = body.decode("utf-8", errors="replace")
            raise TelegramError(f"telegram: status {status}: {text_body}", status)

        try:
            reply = json.loads(body)
        except ValueError as exc:
            raise TelegramError(f"decode response: {exc}") from exc
        if not isinstance(reply, dict):
            raise TelegramError("decode response: expected a JSON object")

        if reply.get("ok") is not True:
            description = reply.get("description")
            if isinstance(description, str) and description:
                raise TelegramError(f"telegram: {description}")
            raise TelegramError("telegram: response not ok")

        self._log("telegram message sent chat_id=%s", chat_id)