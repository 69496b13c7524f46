import io
import os
import socket
import sys
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from argonkit.download import DEFAULT_USER_AGENT, Download
from argonkit.errors import NetworkError, UpdateError

BODY = b"This is a test!" * 100


class _Handler(BaseHTTPRequestHandler):
    seen = []

    def log_message(self, format, *args):
        pass

    def do_GET(self):
        type(self).seen.append(dict(self.headers.items()))
        if self.path == "/file":
            self.send_response(200)
            self.send_header("Content-Length", str(len(BODY)))
            self.end_headers()
            self.wfile.write(BODY)
        elif self.path == "/nolength":
            self.send_response(200)
            self.end_headers()
            self.wfile.write(BODY)
        else:
            self.send_response(404)
            self.send_header("Content-Length", "0")
            self.end_headers()


@pytest.fixture
def server():
    _Handler.seen = []
    httpd = ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{httpd.server_address[1]}"
    finally:
        httpd.shutdown()
        httpd.server_close()


def _closed_port():
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def test_download_writes_body(server):
    out = io.BytesIO()
    Download(server + "/file").download_to(out)
    assert out.getvalue() == BODY


def test_download_without_content_length(server):
    out = io.BytesIO()
    Download(server + "/nolength", show_progress=True).download_to(out)
    assert out.getvalue() == BODY


def test_default_user_agent_is_sent(server):
    out = io.BytesIO()
    Download(server + "/file").download_to(out)
    assert out.getvalue() == BODY
    assert _Handler.seen[0]["User-Agent"] == DEFAULT_USER_AGENT


def test_custom_header_is_sent(server):
    download = Download(server + "/file").set_header("Accept", "application/octet-stream")
    assert download.headers == {"Accept": "application/octet-stream"}
    out = io.BytesIO()
    download.download_to(out)
    assert out.getvalue() == BODY
    assert _Handler.seen[0]["Accept"] == "application/octet-stream"


def test_user_agent_override_is_case_insensitive(server):
    download = Download(server + "/file")
    download.set_header("user-agent", "first")
    download.set_header("User-Agent", "second")
    assert download.headers == {"User-Agent": "second"}
    download.download_to(io.BytesIO())
    assert _Handler.seen[0]["User-Agent"] == "second"


def test_set_header_returns_self():
    download = Download("http://localhost/")
    assert download.set_header("X-One", "1") is download


def test_unsuccessful_status_raises(server):
    out = io.BytesIO()
    with pytest.raises(UpdateError) as info:
        Download(server + "/missing").download_to(out)
    assert "404" in str(info.value)
    assert out.getvalue() == b""


def test_unreachable_host_raises_network_error():
    with pytest.raises(NetworkError):
        Download(f"http://127.0.0.1:{_closed_port()}/file").download_to(io.BytesIO())


def test_progress_bar_finishes(server, capsys):
    out = io.BytesIO()
    Download(server + "/file", show_progress=True).download_to(out)
    err = capsys.readouterr().err
    assert out.getvalue() == BODY
    assert err.rstrip().endswith("Done")


def test_progress_style_is_used(server, capsys):
    download = Download(
        server + "/file",
        show_progress=True,
        progress_template="{bar:10}|{msg}",
        progress_chars="#>.",
    )
    download.download_to(io.BytesIO())
    last_line = capsys.readouterr().err.strip().split("\r")[-1]
    assert last_line == "##########|Done"


def test_no_progress_output_when_disabled(server, capsys):
    Download(server + "/file").download_to(io.BytesIO())
    assert capsys.readouterr().err == ""


def test_ssl_vars_set_on_linux(server, monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")
    for name in ("SSL_CERT_FILE", "SSL_CERT_DIR"):
        monkeypatch.setenv(name, "x")
        monkeypatch.delenv(name)
    out = io.BytesIO()
    Download(server + "/file").download_to(out)
    assert out.getvalue() == BODY
    assert os.environ["SSL_CERT_FILE"] == "/etc/ssl/certs/ca-certificates.crt"
    assert os.environ["SSL_CERT_DIR"] == "/etc/ssl/certs"


def test_ssl_vars_keep_existing_value(server, monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setenv("SSL_CERT_FILE", "/custom/bundle.pem")
    out = io.BytesIO()
    Download(server + "/file").download_to(out)
    assert out.getvalue() == BODY
    assert os.environ["SSL_CERT_FILE"] == "/custom/bundle.pem"