"""WSGI middleware adding security-related response headers."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from werkzeug.wrappers import Request

from pommikit.headers import (
    CONTENT_SECURITY_POLICY,
    CONTENT_SECURITY_POLICY_REPORT_ONLY,
    REFERRER_POLICY,
    STRICT_TRANSPORT_SECURITY,
    X_CONTENT_TYPE_OPTIONS,
    X_FRAME_OPTIONS,
    X_XSS_PROTECTION,
)

__all__ = ["SecureConfig", "SecureMiddleware"]

WSGIApp = Callable[[dict, Callable], Iterable[bytes]]


@dataclass
class SecureConfig:
    """Settings for :class:`SecureMiddleware`; an empty string leaves a header out.

    The Strict-Transport-Security header is sent only over HTTPS and only
    when ``hsts_max_age`` is positive.
    """

    skip: Optional[Callable[[Request], bool]] = None
    xss_protection: str = "1; mode=block"
    content_type_nosniff: str = "nosniff"
    x_frame_options: str = "SAMEORIGIN"
    content_security_policy: str = ""
    csp_report_only: bool = False
    referrer_policy: str = ""
    hsts_max_age: int = 0
    hsts_exclude_subdomains: bool = False
    hsts_preload_enabled: bool = False


class SecureMiddleware:
    """Sets the configured security headers; headers the app sets itself win."""

    def __init__(self, app: WSGIApp, config: Optional[SecureConfig] = None, **options: Any) -> None:
        config = config or SecureConfig()
        if options:
            config = dataclasses.replace(config, **options)
        self.app = app
        self.config = config

    def _headers(self, environ: dict) -> list[tuple[str, str]]:
        config = self.config
        headers: list[tuple[str, str]] = []
        if config.xss_protection:
            headers.append((X_XSS_PROTECTION, config.xss_protection))
        if config.content_type_nosniff:
            headers.append((X_CONTENT_TYPE_OPTIONS, config.content_type_nosniff))
        if config.x_frame_options:
            headers.append((X_FRAME_OPTIONS, config.x_frame_options))
        if config.content_security_policy:
            name = CONTENT_SECURITY_POLICY_REPORT_ONLY if config.csp_report_only else CONTENT_SECURITY_POLICY
            headers.append((name, config.content_security_policy))
        if config.referrer_policy:
            headers.append((REFERRER_POLICY, config.referrer_policy))

        is_https = (
            environ.get("wsgi.url_scheme") == "https"
            or environ.get("HTTP_X_FORWARDED_PROTO") == "https"
        )
        if is_https and config.hsts_max_age > 0:
            subdomains = "" if config.hsts_exclude_subdomains else "; includeSubdomains"
            if config.hsts_preload_enabled:
                subdomains += "; preload"
            headers.append((STRICT_TRANSPORT_SECURITY, f"max-age={config.hsts_max_age}{subdomains}"))
        return headers

    def __call__(self, environ: dict, start_response: Callable) -> Iterable[bytes]:
        config = self.config
        if config.skip is not None and config.skip(Request(environ)):
            return self.app(environ, start_response)

        defaults = self._headers(environ)

        def wrapped(status: str, headers: list, exc_info: Any = None) -> Callable:
            present = {name.lower() for name, _ in headers}
            merged = list(headers) + [(n, v) for n, v in defaults if n.lower() not in present]
            return start_response(status, merged, exc_info)

        return self.app(environ, wrapped)