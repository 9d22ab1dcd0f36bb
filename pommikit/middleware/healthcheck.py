"""WSGI middleware answering GET requests with the result of a health probe."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from werkzeug.wrappers import Request, Response

__all__ = ["DEFAULT_HEALTHZ_ENDPOINT", "HealthCheckConfig", "HealthCheckMiddleware"]

DEFAULT_HEALTHZ_ENDPOINT = "/healthz"

WSGIApp = Callable[[dict, Callable], Iterable[bytes]]


@dataclass
class HealthCheckConfig:
    """Settings for :class:`HealthCheckMiddleware`.

    ``skip(request)`` bypasses the middleware when it returns True;
    ``probe(request)`` reports whether the service is healthy. Without a
    probe the service is always reported healthy.
    """

    skip: Optional[Callable[[Request], bool]] = None
    probe: Optional[Callable[[Request], bool]] = None


class HealthCheckMiddleware:
    """Answers every GET request itself: 200 when healthy, 503 otherwise.

    Other methods reach the wrapped application.
    """

    def __init__(self, app: WSGIApp, config: Optional[HealthCheckConfig] = None, **options: Any) -> None:
        config = config or HealthCheckConfig()
        if options:
            config = dataclasses.replace(config, **options)
        self.app = app
        self.config = config

    def __call__(self, environ: dict, start_response: Callable) -> Iterable[bytes]:
        config = self.config
        request = Request(environ)
        if config.skip is not None and config.skip(request):
            return self.app(environ, start_response)
        if request.method != "GET":
            return self.app(environ, start_response)
        healthy = config.probe is None or config.probe(request)
        status = 200 if healthy else 503
        return Response(status=status)(environ, start_response)