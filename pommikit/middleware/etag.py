"""WSGI middleware adding ETags to successful responses and answering 304."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from werkzeug.wrappers import Request

from pommikit.headers import ETAG

__all__ = ["ETagConfig", "ETagMiddleware", "compute_etag"]

_WEAK_PREFIX = "W/"
_MAX_BODY = 0xFFFFFFFF
_POLYNOMIAL = 0xD5828281

WSGIApp = Callable[[dict, Callable], Iterable[bytes]]


def _make_table(poly: int) -> tuple[int, ...]:
    table = []
    for index in range(256):
        crc = index
        for _ in range(8):
            crc = (crc >> 1) ^ poly if crc & 1 else crc >> 1
        table.append(crc)
    return tuple(table)


_TABLE = _make_table(_POLYNOMIAL)


def _checksum(data: bytes) -> int:
    crc = 0xFFFFFFFF
    for byte in data:
        crc = _TABLE[(crc ^ byte) & 0xFF] ^ (crc >> 8)
    return crc ^ 0xFFFFFFFF


def compute_etag(body: bytes, weak: bool = False) -> str:
    """Return the ETag of ``body``: its length and a CRC-32 checksum, quoted."""
    if len(body) > _MAX_BODY:
        raise ValueError("etag: body is too large")
    tag = f'"{len(body)}-{_checksum(body)}"'
    return _WEAK_PREFIX + tag if weak else tag


@dataclass
class ETagConfig:
    """Settings for :class:`ETagMiddleware`.

    ``skip(request)`` bypasses the middleware when it returns True;
    ``weak`` marks generated ETags as weak.
    """

    skip: Optional[Callable[[Request], bool]] = None
    weak: bool = False


def _run(app: WSGIApp, environ: dict) -> tuple[str, list, bytes]:
    captured: dict[str, Any] = {}
    chunks: list[bytes] = []

    def capture(status: str, headers: list, exc_info: Any = None) -> Callable:
        if exc_info is not None and captured:
            raise exc_info[1].with_traceback(exc_info[2])
        captured["status"] = status
        captured["headers"] = list(headers)
        return chunks.append

    result = app(environ, capture)
    try:
        for chunk in result:
            chunks.append(chunk)
    finally:
        close = getattr(result, "close", None)
        if close is not None:
            close()
    return captured["status"], captured["headers"], b"".join(chunks)


class ETagMiddleware:
    """Buffers the response and tags 200 responses that carry no ETag yet.

    A request whose If-None-Match equals the tag gets 304 Not Modified with
    an empty body.
    """

    def __init__(self, app: WSGIApp, config: Optional[ETagConfig] = None, **options: Any) -> None:
        config = config or ETagConfig()
        if options:
            config = dataclasses.replace(config, **options)
        self.app = app
        self.config = config

    def __call__(self, environ: dict, start_response: Callable) -> Iterable[bytes]:
        config = self.config
        if config.skip is not None and config.skip(Request(environ)):
            return self.app(environ, start_response)

        status, headers, body = _run(self.app, environ)
        code = int(status.split(" ", 1)[0])
        has_etag = any(name.lower() == ETAG.lower() for name, _ in headers)
        if code != 200 or has_etag:
            start_response(status, headers)
            return [body]

        if len(body) > _MAX_BODY:
            start_response("413 Request Entity Too Large", headers)
            return []

        etag = compute_etag(body, config.weak)
        client_etag = environ.get("HTTP_IF_NONE_MATCH", "")
        if client_etag.startswith(_WEAK_PREFIX):
            matched = client_etag[2:] == etag or client_etag[2:] == etag[2:]
        else:
            matched = client_etag == etag

        if matched:
            kept = [(name, value) for name, value in headers if name.lower() != "content-length"]
            start_response("304 Not Modified", kept)
            return []

        start_response(status, headers + [(ETAG, etag)])
        return [body]