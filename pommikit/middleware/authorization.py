"""WSGI middleware that lets a request through only for an authorized identity."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from werkzeug.wrappers import Request, Response

from pommikit.middleware.authentication import CONTEXT_KEY

__all__ = ["AuthorizationConfig", "AuthorizationMiddleware"]

WSGIApp = Callable[[dict, Callable], Iterable[bytes]]


def _identity_present(request: Request, identity: Any) -> bool:
    return identity is not None


def _unauthorized(request: Request, identity: Any) -> WSGIApp:
    return Response(status=401)


@dataclass
class AuthorizationConfig:
    """Settings for :class:`AuthorizationMiddleware`.

    ``identity_type`` restricts the identities accepted; None accepts any.
    ``authorize_handler(request, identity)`` decides; by default every
    present identity is authorized. ``unauthorized_handler(request, identity)``
    returns the WSGI response for refused requests, 401 by default.
    """

    context_key: str = CONTEXT_KEY
    identity_type: Optional[Any] = None
    authorize_handler: Callable[[Request, Any], bool] = _identity_present
    authorized_handler: Optional[Callable[[Request, Any], None]] = None
    unauthorized_handler: Callable[[Request, Any], WSGIApp] = _unauthorized


class AuthorizationMiddleware:
    """Checks the identity stored in the environ before calling the app."""

    def __init__(self, app: WSGIApp, config: Optional[AuthorizationConfig] = None, **options: Any) -> None:
        config = config or AuthorizationConfig()
        if options:
            config = dataclasses.replace(config, **options)
        self.app = app
        self.config = config

    def __call__(self, environ: dict, start_response: Callable) -> Iterable[bytes]:
        config = self.config
        request = Request(environ)
        identity = environ.get(config.context_key)
        wrong_type = config.identity_type is not None and not isinstance(identity, config.identity_type)
        if identity is None or wrong_type:
            return config.unauthorized_handler(request, None)(environ, start_response)
        if not config.authorize_handler(request, identity):
            return config.unauthorized_handler(request, identity)(environ, start_response)
        if config.authorized_handler is not None:
            config.authorized_handler(request, identity)
        return self.app(environ, start_response)