"""WSGI middleware that reads the authentication cookie and stores an identity."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from werkzeug.wrappers import Request, Response

from pommikit.auth import (
    AuthConfig,
    AuthCookieMissingError,
    AuthError,
    CookieValue,
    KeyNotVerifiedError,
    get_cookie,
)

__all__ = ["CONTEXT_KEY", "ERRORS_KEY", "AuthenticationConfig", "AuthenticationMiddleware"]

CONTEXT_KEY = "auth/context"
ERRORS_KEY = "pommikit.errors"

WSGIApp = Callable[[dict, Callable], Iterable[bytes]]


@dataclass
class AuthenticationConfig:
    """Settings for :class:`AuthenticationMiddleware`.

    ``factory(request, cookie_value)`` builds the identity and raises when it
    cannot. ``not_authenticated_handler(request)`` returns the WSGI response
    used when no cookie is present; by default it is 401 Unauthorized.
    ``after_handler(request, identity)`` runs after the factory.
    """

    auth_config: Optional[AuthConfig] = None
    factory: Optional[Callable[[Request, Optional[CookieValue]], Any]] = None
    context_key: str = CONTEXT_KEY
    not_authenticated_handler: Optional[Callable[[Request], WSGIApp]] = None
    after_handler: Optional[Callable[[Request, Any], None]] = None


def _record_error(environ: dict, error: BaseException) -> None:
    environ.setdefault(ERRORS_KEY, []).append(error)


class AuthenticationMiddleware:
    """Stores the identity of the cookie's user in the WSGI environ.

    A missing cookie stops the request. Any other cookie problem is recorded
    in ``environ[ERRORS_KEY]`` and the factory still runs, with the decoded
    but unverified cookie value where there is one.
    """

    def __init__(self, app: WSGIApp, config: Optional[AuthenticationConfig] = None, **options: Any) -> None:
        config = config or AuthenticationConfig()
        if options:
            config = dataclasses.replace(config, **options)
        if config.auth_config is None:
            raise ValueError("authentication: auth_config is required")
        if config.factory is None:
            raise ValueError("authentication: factory is required")
        self.app = app
        self.config = config

    def __call__(self, environ: dict, start_response: Callable) -> Iterable[bytes]:
        config = self.config
        request = Request(environ)
        cookie_value: Optional[CookieValue]
        try:
            cookie_value = get_cookie(request, config.auth_config)
        except AuthCookieMissingError:
            if config.not_authenticated_handler is not None:
                return config.not_authenticated_handler(request)(environ, start_response)
            return Response(status=401)(environ, start_response)
        except KeyNotVerifiedError as exc:
            _record_error(environ, exc)
            cookie_value = exc.cookie_value
        except AuthError as exc:
            _record_error(environ, exc)
            cookie_value = None

        identity = None
        try:
            identity = config.factory(request, cookie_value)
        except Exception:  # a failed factory leaves the request anonymous
            identity = None
        else:
            environ[config.context_key] = identity

        if config.after_handler is not None:
            config.after_handler(request, identity)

        return self.app(environ, start_response)