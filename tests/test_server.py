import logging
from wsgiref.util import setup_testing_defaults

from legalbot.server import bot_main, make_bot_app, make_prompt_app, prompt_main


def _call(app, headers=None):
    environ = {}
    setup_testing_defaults(environ)
    for name, value in (headers or {}).items():
        environ["HTTP_" + name.upper().replace("-", "_")] = value
    captured = {}

    def start_response(status, response_headers):
        captured["status"] = status
        captured["headers"] = dict(response_headers)

    body = b"".join(app(environ, start_response))
    return captured["status"], captured["headers"], body


def test_bot_app_accepts_matching_token():
    app = make_bot_app("secret")
    status, _, body = _call(app, {"X-Telegram-Bot-Api-Secret-Token": "secret"})
    assert status.startswith("200")
    assert body == b"ok"


def test_bot_app_rejects_wrong_token():
    app = make_bot_app("secret")
    status, headers, body = _call(app, {"X-Telegram-Bot-Api-Secret-Token": "token"})
    assert status == "401 Unauthorized"
    assert body.strip() == b"Unauthorized"
    assert headers["X-Content-Type-Options"] == "nosniff"


def test_bot_app_rejects_missing_token():
    status, _, body = _call(make_bot_app("secret"))
    assert status.startswith("401")
    assert body != b"ok"


def test_bot_app_empty_secret_accepts_missing_header():
    status, _, body = _call(make_bot_app(""))
    assert status.startswith("200")
    assert body == b"ok"


def test_bot_app_logs_request_id(caplog):
    logger = logging.getLogger("test.server.bot")
    app = make_bot_app("secret", logger)
    with caplog.at_level(logging.INFO, logger="test.server.bot"):
        _call(app, {"X-Telegram-Bot-Api-Secret-Token": "secret", "X-Request-ID": "req-42"})
    assert "req-42" in caplog.text


def test_prompt_app_answers_ok(caplog):
    logger = logging.getLogger("test.server.prompt")
    with caplog.at_level(logging.INFO, logger="test.server.prompt"):
        status, _, body = _call(make_prompt_app(logger), {"X-Request-ID": "abc"})
    assert status.startswith("200")
    assert body == b"ok"
    assert "abc" in caplog.text


def test_bot_main_warns_without_secret_and_reports_bad_address(monkeypatch, caplog):
    monkeypatch.delenv("TELEGRAM_SECRET_TOKEN", raising=False)
    with caplog.at_level(logging.INFO, logger="legalbot.bot"):
        bot_main(["--listen", "localhost:notaport"])
    assert "TELEGRAM_SECRET_TOKEN not set" in caplog.text
    assert "starting bot" in caplog.text
    assert "server error" in caplog.text


def test_bot_main_no_warning_with_secret(monkeypatch, caplog):
    monkeypatch.setenv("TELEGRAM_SECRET_TOKEN", "secret")
    with caplog.at_level(logging.INFO, logger="legalbot.bot"):
        bot_main(["-listen", "localhost:99999"])
    assert "TELEGRAM_SECRET_TOKEN not set" not in caplog.text
    assert "server error" in caplog.text


def test_prompt_main_reports_bad_address(caplog):
    with caplog.at_level(logging.INFO, logger="legalbot.prompt"):
        prompt_main(["--listen", "no-port-here"])
    assert "starting prompt service" in caplog.text
    assert "server error" in caplog.text