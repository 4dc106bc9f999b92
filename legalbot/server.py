"""HTTP entry points of the bot and prompt services."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple
from wsgiref.simple_server import make_server

from legalbot.handler import check_secret_token

StartResponse = Callable[[str, List[Tuple[str, str]]], object]
WSGIApp = Callable[[dict, StartResponse], Iterable[bytes]]


def _headers(environ: dict) -> Dict[str, str]:
    headers = {
        key[5:].replace("_", "-").title(): value
        for key, value in environ.items()
        if key.startswith("HTTP_")
    }
    for key in ("CONTENT_TYPE", "CONTENT_LENGTH"):
        if environ.get(key):
            headers[key.replace("_", "-").title()] = environ[key]
    return headers


def _remote(environ: dict) -> str:
    addr = environ.get("REMOTE_ADDR", "")
    port = environ.get("REMOTE_PORT")
    return f"{addr}:{port}" if port else addr


def _ok(environ: dict, start_response: StartResponse, logger: logging.Logger) -> List[bytes]:
    request_id = _headers(environ).get("X-Request-Id", "")
    if request_id:
        logger.info("ping request_id=%s", request_id)
    start_response("200 OK", [("Content-Type", "text/plain; charset=utf-8")])
    return [b"ok"]


def make_bot_app(secret: str, logger: Optional[logging.Logger] = None) -> WSGIApp:
    """Build the bot's WSGI application, guarded by the Telegram secret token."""
    log = logger if logger is not None else logging.getLogger("legalbot.bot")

    def app(environ: dict, start_response: StartResponse) -> List[bytes]:
        if not check_secret_token(_headers(environ), secret, log, _remote(environ)):
            start_response(
                "401 Unauthorized",
                [
                    ("Content-Type", "text/plain; charset=utf-8"),
                    ("X-Content-Type-Options", "nosniff"),
                ],
            )
            return [b"Unauthorized\n"]
        return _ok(environ, start_response, log)

    return app


def make_prompt_app(logger: Optional[logging.Logger] = None) -> WSGIApp:
    """Build the prompt service's WSGI application."""
    log = logger if logger is not None else logging.getLogger("legalbot.prompt")

    def app(environ: dict, start_response: StartResponse) -> List[bytes]:
        return _ok(environ, start_response, log)

    return app


def _split_address(addr: str) -> Tuple[str, int]:
    host, sep, port_text = addr.rpartition(":")
    if not sep:
        raise ValueError(f"address {addr}: missing port in address")
    host = host.strip("[]")
    if not port_text.isdigit() or not 0 <= int(port_text) <= 65535:
        raise ValueError(f"address {addr}: invalid port")
    return host, int(port_text)


def _stdout_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            logging.Formatter("time=%(asctime)s level=%(levelname)s msg=%(message)s")
        )
        logger.addHandler(handler)
    if logger.level == logging.NOTSET:
        logger.setLevel(logging.INFO)
    return logger


def _parse_listen(argv: Optional[Sequence[str]], default: str) -> str:
    parser = argparse.ArgumentParser()
    parser.add_argument("-listen", "--listen", default=default, help="listen address")
    return parser.parse_args(argv).listen


def _serve(addr: str, app: WSGIApp, logger: logging.Logger) -> None:
    try:
        host, port = _split_address(addr)
        with make_server(host, port, app) as server:
            server.serve_forever()
    except (OSError, ValueError, OverflowError) as exc:
        logger.error("server error err=%s", exc)


def bot_main(argv: Optional[Sequence[str]] = None) -> None:
    """Run the bot's HTTP endpoint."""
    addr = _parse_listen(argv, ":8080")
    logger = _stdout_logger("legalbot.bot")
    secret = os.environ.get("TELEGRAM_SECRET_TOKEN", "")
    if not secret:
        logger.warning("TELEGRAM_SECRET_TOKEN not set")
    logger.info("starting bot addr=%s", addr)
    _serve(addr, make_bot_app(secret, logger), logger)


def prompt_main(argv: Optional[Sequence[str]] = None) -> None:
    """Run the prompt service's HTTP endpoint."""
    addr = _parse_listen(argv, ":8090")
    logger = _stdout_logger("legalbot.prompt")
    logger.info("starting prompt service addr=%s", addr)
    _serve(addr, make_prompt_app(logger), logger)