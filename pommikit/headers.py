"""Names of HTTP headers used across the package."""

X_REQUEST_ID = "X-Request-ID"
ETAG = "ETag"
IF_NONE_MATCH = "If-None-Match"
IF_MATCH = "If-Match"
CACHE_CONTROL = "Cache-Control"
STRICT_TRANSPORT_SECURITY = "Strict-Transport-Security"
X_FORWARDED_PROTO = "X-Forwarded-Proto"
X_CONTENT_TYPE_OPTIONS = "X-Content-Type-Options"
X_XSS_PROTECTION = "X-XSS-Protection"
X_FRAME_OPTIONS = "X-Frame-Options"
CONTENT_SECURITY_POLICY = "Content-Security-Policy"
CONTENT_SECURITY_POLICY_REPORT_ONLY = "Content-Security-Policy-Report-Only"
REFERRER_POLICY = "Referrer-Policy"
VARY = "Vary"