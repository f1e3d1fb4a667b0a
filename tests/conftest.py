"""
pytest configuration and fixtures.
"""

import io
from pathlib import Path

import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sysprohttp import ServerConfig
from sysprohttp.http import ResponseWriter


def split_response(raw: bytes) -> tuple[str, dict, bytes]:
    """Split raw response bytes into (status line, headers, body)."""
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("latin-1").split("\r\n")
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(": ")
        headers[name] = value
    return lines[0], headers, body


@pytest.fixture
def parse_response():
    """The split_response helper, for tests that inspect raw bytes."""
    return split_response


@pytest.fixture
def docroot(tmp_path: Path) -> Path:
    """Document root with a few files of interesting sizes."""
    root = tmp_path / "www"
    root.mkdir()
    (root / "empty.txt").write_bytes(b"")
    (root / "one.txt").write_bytes(b"x")
    (root / "hello.txt").write_bytes(b"Hello, World!\n")
    (root / "index.html").write_bytes(b"<h1>index</h1>")
    # Larger than one 1024-byte copy block, and not a multiple of it
    (root / "big.bin").write_bytes(bytes(range(256)) * 10 + b"tail")
    (root / "sub").mkdir()
    (root / "sub" / "nested.txt").write_bytes(b"nested")
    return root


@pytest.fixture
def config(docroot: Path) -> ServerConfig:
    """Default test configuration rooted at the docroot fixture."""
    return ServerConfig(docroot=str(docroot))


@pytest.fixture
def output() -> io.BytesIO:
    """Stream the response is written to."""
    return io.BytesIO()


@pytest.fixture
def writer(output: io.BytesIO, config: ServerConfig) -> ResponseWriter:
    """ResponseWriter over the output fixture."""
    return ResponseWriter(output, config)


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /hello.txt HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: */*\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with a body."""
    body = b"name=John&email=john%40example.com"
    return (
        b"POST /form HTTP/1.0\r\n"
        b"Host: localhost:8080\r\n"
        b"Content-Type: application/x-www-form-urlencoded\r\n"
        + f"Content-Length: {len(body)}\r\n".encode()
        + b"\r\n"
    ) + body
