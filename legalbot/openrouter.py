"""Client for the OpenRouter chat completion API."""

from __future__ import annotations

import logging
import os
import re
import urllib.error
import urllib.request
from typing import Optional

DEFAULT_ENDPOINT = "https://openrouter.ai/v1/chat/completions"
DEFAULT_TIMEOUT = 15.0

_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def _parse_duration(text: str) -> float:
    """Parse a duration such as ``"20s"`` or ``"1m30s"`` into seconds."""
    rest = text
    sign = 1.0
    if rest and rest[0] in "+-":
        sign = -1.0 if rest[0] == "-" else 1.0
        rest = rest[1:]
    if rest == "0":
        return 0.0
    if not rest:
        raise ValueError(f"invalid duration {text!r}")
    total = 0.0
    pos = 0
    while pos < len(rest):
        match = _DURATION_PART.match(rest, pos)
        if match is None:
            raise ValueError(f"invalid duration {text!r}")
        total += float(match.group(1)) * _UNITS[match.group(2)]
        pos = match.end()
    return sign * total


def _timeout_from_env() -> float:
    value = os.environ.get("OPENROUTER_TIMEOUT", "")
    if value:
        try:
            return _parse_duration(value)
        except ValueError:
            pass
    return DEFAULT_TIMEOUT


class OpenRouterError(Exception):
    """Raised when a chat completion request fails."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class OpenRouterClient:
    """Sends prompts to the OpenRouter API and returns the raw response body.

    Unless given, the timeout comes from ``OPENROUTER_TIMEOUT`` (e.g. ``"20s"``,
    default 15 seconds) and the endpoint from ``OPENROUTER_ENDPOINT``.
    """

    def __init__(
        self,
        api_key: str,
        endpoint: Optional[str] = None,
        timeout: Optional[float] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.api_key = api_key
        self.endpoint = endpoint or os.environ.get("OPENROUTER_ENDPOINT") or DEFAULT_ENDPOINT
        self.timeout = _timeout_from_env() if timeout is None else float(timeout)
        self.logger = logger if logger is not None else logging.getLogger(__name__)

    def chat_completion(self, prompt: str, request_id: Optional[str] = None) -> str:
        """POST ``prompt`` to the endpoint and return the response body."""
        try:
            request = urllib.request.Request(
                self.endpoint,
                data=prompt.encode("utf-8"),
                method="POST",
                headers={
                    "Authorization": self.api_key,
                    "Content-Type": "application/json",
                },
            )
        except ValueError as exc:
            raise OpenRouterError(f"new request: {exc}") from exc

        if request_id and self.logger is not None:
            self.logger.info("openrouter request request_id=%s", request_id)

        timeout = self.timeout if self.timeout > 0 else None
        try:
            with urllib.request.urlopen(request, timeout=timeout) as response:
                status = response.status
                body = response.read()
        except urllib.error.HTTPError as exc:
            status = exc.code
            try:
                body = exc.read()
            except OSError as read_exc:
                raise OpenRouterError(f"read body: {read_exc}", status) from read_exc
        except (urllib.error.URLError, OSError) as exc:
            raise OpenRouterError(f"send request: {exc}") from exc

        text = body.decode("utf-8", errors="replace")
        if status >= 400:
            raise OpenRouterError(f"openrouter: status {status}: {text}", status)

        if request_id and self.logger is not None:
            self.logger.info("openrouter response request_id=%s", request_id)
        return text