# pommikit

Building blocks for Python web applications: password hashing, signed
authentication cookies, request value binding, a handful of WSGI
middleware and a few small utilities.

## Installation

```
pip install pommikit
```

To run the test suite:

```
pip install "pommikit[test]"
pytest
```

## What is inside

| Module | Purpose |
| --- | --- |
| `pommikit.hasher` | Argon2id and PBKDF2 password hashing with self-describing hashes and rehash detection |
| `pommikit.auth` | ECDSA-signed authentication cookies, identities and signing keys |
| `pommikit.binding` | Chainable binding of query, form and path values with error collection |
| `pommikit.middleware.authentication` | Reads the auth cookie and stores an identity in the WSGI environ |
| `pommikit.middleware.authorization` | Refuses requests whose identity is missing or not authorized |
| `pommikit.middleware.etag` | Adds ETags to `200 OK` responses and answers `304 Not Modified` |
| `pommikit.middleware.healthcheck` | Answers GET requests with the result of a health probe |
| `pommikit.middleware.secure` | Security headers (XSS, nosniff, frame options, CSP, referrer policy, HSTS) |
| `pommikit.memory` | Key–value cache holding weak references to its values |
| `pommikit.pool` | Thread-safe object pool |
| `pommikit.probability` | Values paired with cumulative weights, sorted by weight |
| `pommikit.casing` | PascalCase conversion |
| `pommikit.dates` | Same-day and inclusive range checks for datetimes |
| `pommikit.headers` | Common HTTP header names |

## Password hashing

```python
from pommikit import hasher

h = hasher.new()
password = "password"
stored = h.hash(password)

result = h.verify(stored, password)
if result is hasher.PasswordVerificationResult.SUCCESS:
    ...
elif result is hasher.PasswordVerificationResult.NEEDS_REHASH:
    stored = h.hash(password)
```

New hashes use Argon2id. Hashes made with PBKDF2 still verify, but a correct
password reports `NEEDS_REHASH` so the hash can be upgraded. A hash made
with the wrong algorithm, with too short a salt or subkey, or that is not
valid base64 raises a subclass of `hasher.HasherError`. `hasher.new_argon2id()`,
`hasher.new_pbkdf2()` and `hasher.new_pbkdf2_from_algo(algorithm)` give the
single-algorithm hashers.

## Authentication cookies

```python
import uuid
from pommikit import auth

config = auth.AuthConfig(signing_key=auth.new_signing_key())   # P-521 key
value = auth.CookieValue(id=uuid.uuid4(), username="alice")
value.write_to_response(response, config)   # a werkzeug Response

cookie = auth.get_cookie(request, config)   # a werkzeug Request
identity = auth.new_identity(cookie)
```

`get_cookie` raises `AuthCookieMissingError` when there is no cookie and
`KeyNotVerifiedError` when the signature does not match; other problems
raise `AuthError`. `encode_auth_token` and `decode_auth_token` work on the
token strings directly, and `delete_cookie` tells the client to drop the
cookie.

## Binding request values

```python
from pommikit.binding import query_params_binder

binder = query_params_binder(request)
binder.string("name").should_bool("active").should_date("since")
error = binder.bind_error()   # first BindingError, or None
if error is None:
    name = binder.bound["name"]
```

Binders also exist for form fields (`form_field_binder`) and path
parameters (`path_params_binder`). Errors are collected, not raised; with
`fail_fast` (the default) binding stops at the first one.

## Middleware

Each middleware wraps a WSGI application and takes a config object, or the
same settings as keyword arguments:

```python
from pommikit.middleware.etag import ETagConfig, ETagMiddleware
from pommikit.middleware.healthcheck import HealthCheckMiddleware
from pommikit.middleware.secure import SecureConfig, SecureMiddleware

app = ETagMiddleware(app, ETagConfig(weak=True))
app = SecureMiddleware(app, SecureConfig(hsts_max_age=31536000))
health = HealthCheckMiddleware(app, probe=lambda request: True)
```

`AuthenticationMiddleware` needs an `auth_config` and a `factory` that
builds the identity from the cookie value; `AuthorizationMiddleware` reads
that identity from the environ and refuses the request with 401 by default.

## Utilities

```python
from pommikit.memory import Cache
from pommikit.casing import pascal_case

cache = Cache()
cache.set("1", value)   # value must support weak references
item = cache.get("1")   # None once nothing else holds the value

pascal_case("hello world-icon")   # "HelloWorldIcon"
```

## What it does not do

- There is no CSRF middleware and no request-id middleware.
- There is no generator of random identifiers.
- `probability.Generator` only stores values with their cumulative weights;
  it does not draw random values.
- It runs no server of its own: the middleware wraps a WSGI application
  that you serve with any WSGI server.