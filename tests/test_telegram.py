import logging
import socket
import threading
import urllib.parse
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from legalbot.telegram import API_URL, TelegramClient, TelegramError


class _Recorder:
    def __init__(self):
        self.requests = []
        self.respond = lambda req: (200, b'{"ok":true}')


@pytest.fixture
def server():
    recorder = _Recorder()

    class Handler(BaseHTTPRequestHandler):
        def do_POST(self):
            length = int(self.headers.get("Content-Length", 0))
            body = self.rfile.read(length)
            req = {"method": "POST", "path": self.path, "headers": self.headers, "body": body}
            recorder.requests.append(req)
            status, payload = recorder.respond(req)
            self.send_response(status)
            self.send_header("Content-Length", str(len(payload)))
            self.end_headers()
            self.wfile.write(payload)

        def log_message(self, *args):
            pass

    httpd = ThreadingHTTPServer(("127.0.0.1", 0), Handler)
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    recorder.url = f"http://127.0.0.1:{httpd.server_address[1]}"
    try:
        yield recorder
    finally:
        httpd.shutdown()
        httpd.server_close()


def test_send_message_success(server):
    client = TelegramClient("TOKEN", api_url=server.url, timeout=1)
    assert client.send_message(123, "hi") is None
    assert len(server.requests) == 1
    req = server.requests[0]
    assert req["method"] == "POST"
    assert req["path"] == "/botTOKEN/sendMessage"
    assert req["headers"].get("Content-Type") == "application/x-www-form-urlencoded"
    form = urllib.parse.parse_qs(req["body"].decode())
    assert form == {"chat_id": ["123"], "text": ["hi"]}


def test_send_message_encodes_special_characters(server):
    client = TelegramClient("TOKEN", api_url=server.url, timeout=1)
    client.send_message(-5, "a&b=c привет")
    form = urllib.parse.parse_qs(server.requests[0]["body"].decode())
    assert form == {"chat_id": ["-5"], "text": ["a&b=c привет"]}


def test_send_message_http_error(server):
    server.respond = lambda req: (418, b"boom\n")
    client = TelegramClient("TOKEN", api_url=server.url, timeout=1)
    with pytest.raises(TelegramError) as info:
        client.send_message(1, "hi")
    assert "boom" in str(info.value)
    assert info.value.status == 418


def test_send_message_api_failure(server):
    server.respond = lambda req: (200, b'{"ok":false,"description":"fail"}')
    client = TelegramClient("TOKEN", api_url=server.url, timeout=1)
    with pytest.raises(TelegramError) as info:
        client.send_message(1, "hi")
    assert str(info.value) == "telegram: fail"


def test_send_message_not_ok_without_description(server):
    server.respond = lambda req: (200, b'{"ok":false}')
    client = TelegramClient("TOKEN", api_url=server.url, timeout=1)
    with pytest.raises(TelegramError) as info:
        client.send_message(1, "hi")
    assert str(info.value) == "telegram: response not ok"


@pytest.mark.parametrize("payload", [b"not json", b"[1, 2]"])
def test_send_message_bad_json(server, payload):
    server.respond = lambda req: (200, payload)
    client = TelegramClient("TOKEN", api_url=server.url, timeout=1)
    with pytest.raises(TelegramError, match="decode response"):
        client.send_message(1, "hi")


def test_send_message_connection_failure():
    sock = socket.socket()
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    client = TelegramClient("TOKEN", api_url=f"http://127.0.0.1:{port}", timeout=1)
    with pytest.raises(TelegramError, match="send message"):
        client.send_message(1, "hi")


def test_send_message_logs(server, caplog):
    logger = logging.getLogger("test.telegram")
    client = TelegramClient("TOKEN", api_url=server.url, timeout=1, logger=logger)
    with caplog.at_level(logging.INFO, logger="test.telegram"):
        client.send_message(42, "hi")
    messages = [r.getMessage() for r in caplog.records]
    assert messages == [
        "send telegram message chat_id=42",
        "telegram message sent chat_id=42",
    ]


def test_defaults():
    client = TelegramClient("TOKEN")
    assert client.api_url == API_URL == "https://api.telegram.org"
    assert client.timeout == 10.0