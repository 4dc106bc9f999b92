"""Chat command handlers of the bot."""

from __future__ import annotations

import hmac
import logging
import os
import threading
from typing import Dict, List, Mapping, Optional, Protocol

from legalbot.repo import Result

DEFAULT_LANGUAGE = "en"
DEFAULT_DOCS_BASE_URL = "https://example.com/docs"
MAX_PROMPT_LENGTH = 8000
RECENT_LIMIT = 5
SECRET_TOKEN_HEADER = "X-Telegram-Bot-Api-Secret-Token"

TEMPORARY_ERROR_MSG = "temporary error, please try again later"
RATE_LIMIT_MSG = "rate limit exceeded, try again later"
HISTORY_DELETED_MSG = "history deleted"

_log = logging.getLogger(__name__)


class TelegramSender(Protocol):
    def send_message(self, chat_id: int, text: str) -> None: ...


class CompletionClient(Protocol):
    def chat_completion(self, prompt: str) -> str: ...


class ResultSaver(Protocol):
    def save_result(self, chat_id: int, data: str) -> int: ...


class ResultFetcher(Protocol):
    def recent_results(self, chat_id: int, limit: int) -> List[Result]: ...


class HistoryDeleter(Protocol):
    def delete_history(self, chat_id: int) -> None: ...


class Limiter(Protocol):
    def allow(self, user: int) -> bool: ...


class MessageTooLongError(ValueError):
    """Raised when a claim exceeds the allowed length."""


class LanguagePreferences:
    """Thread-safe mapping of chat ids to language codes."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._prefs: Dict[int, str] = {}

    def set(self, chat_id: int, lang: str) -> None:
        """Remember ``lang`` for ``chat_id``."""
        with self._lock:
            self._prefs[chat_id] = lang

    def get(self, chat_id: int) -> str:
        """Return the language for ``chat_id``, or English if none was set."""
        with self._lock:
            return self._prefs.get(chat_id, DEFAULT_LANGUAGE)


_language_preferences = LanguagePreferences()


def handle_lang(chat_id: int, lang: str) -> None:
    """Change the language preference of a chat."""
    _language_preferences.set(chat_id, lang)


def lang_for(chat_id: int) -> str:
    """Return the language preference of a chat, defaulting to English."""
    return _language_preferences.get(chat_id)


def load_docs_base_url() -> str:
    """Return ``DOCS_BASE_URL`` from the environment or the default."""
    return os.environ.get("DOCS_BASE_URL") or DEFAULT_DOCS_BASE_URL


def _header(headers: Mapping[str, str], name: str) -> str:
    value = headers.get(name)
    if value is None:
        lowered = name.lower()
        value = next(
            (v for k, v in headers.items() if k.lower() == lowered),
            None,
        )
    return value or ""


def check_secret_token(
    headers: Mapping[str, str],
    expected: str,
    logger: Optional[logging.Logger] = None,
    remote: str = "",
) -> bool:
    """Report whether the Telegram secret token header equals ``expected``."""
    token = _header(headers, SECRET_TOKEN_HEADER)
    if not hmac.compare_digest(token.encode("utf-8"), expected.encode("utf-8")):
        if logger is not None:
            logger.warning("invalid secret token remote=%s", remote)
        return False
    return True


def handle_claim(
    tg: TelegramSender,
    openrouter: CompletionClient,
    repo: ResultSaver,
    limiter: Limiter,
    chat_id: int,
    prompt: str,
) -> None:
    """Ask the model about a claim, store the answer and send it to the chat."""
    length = len(prompt.encode("utf-8"))
    if length > MAX_PROMPT_LENGTH:
        raise MessageTooLongError(f"message too long: {length} characters")
    if not limiter.allow(chat_id):
        tg.send_message(chat_id, RATE_LIMIT_MSG)
        return
    try:
        response = openrouter.chat_completion(prompt)
    except Exception as exc:
        _log.error("openrouter err=%s", exc)
        tg.send_message(chat_id, TEMPORARY_ERROR_MSG)
        return
    try:
        repo.save_result(chat_id, response)
    except Exception as exc:
        _log.error("db save err=%s", exc)
        tg.send_message(chat_id, TEMPORARY_ERROR_MSG)
        return
    tg.send_message(chat_id, response)


def handle_recent(
    tg: TelegramSender,
    repo: ResultFetcher,
    chat_id: int,
    docs_base_url: Optional[str] = None,
) -> None:
    """Send links to the most recent documents of a chat."""
    base = docs_base_url if docs_base_url is not None else load_docs_base_url()
    try:
        results = repo.recent_results(chat_id, RECENT_LIMIT)
    except Exception as exc:
        _log.error("db recent err=%s", exc)
        tg.send_message(chat_id, TEMPORARY_ERROR_MSG)
        return
    for result in results:
        tg.send_message(chat_id, f"{base}/{result.id}")


def handle_delete(tg: TelegramSender, repo: HistoryDeleter, chat_id: int) -> None:
    """Remove the history of a chat and confirm it."""
    try:
        repo.delete_history(chat_id)
    except Exception as exc:
        _log.error("db delete err=%s", exc)
        tg.send_message(chat_id, TEMPORARY_ERROR_MSG)
        return
    tg.send_message(chat_id, HISTORY_DELETED_MSG)