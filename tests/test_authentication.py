import uuid

import pytest
from cryptography.hazmat.primitives.asymmetric import ec
from werkzeug.test import Client
from werkzeug.wrappers import Response

from pommikit import auth
from pommikit.middleware.authentication import (
    CONTEXT_KEY,
    ERRORS_KEY,
    AuthenticationConfig,
    AuthenticationMiddleware,
)

USER_ID = uuid.UUID("12345678-1234-5678-1234-567812345678")
STAMP = bytes(range(16))


@pytest.fixture(scope="module")
def key():
    return auth.new_signing_key_curve(ec.SECP256R1())


def make_token(key, username="alice"):
    return auth.encode_auth_token(key, auth.CookieValue(USER_ID, username, STAMP))


def identity_app(context_key=CONTEXT_KEY, seen=None):
    def app(environ, start_response):
        if seen is not None:
            seen.append(environ)
        identity = environ.get(context_key)
        body = "anonymous" if identity is None else identity.username
        return Response(body)(environ, start_response)

    return app


def factory(request, cookie_value):
    return auth.new_identity(cookie_value)


def build(key, app=None, **options):
    config = AuthenticationConfig(auth_config=auth.AuthConfig(signing_key=key), factory=factory)
    return Client(AuthenticationMiddleware(app or identity_app(), config, **options))


def cookie_header(token, name="auth"):
    return {"Cookie": f"{name}={token}"}


def test_missing_cookie_is_unauthorized(key):
    response = build(key).get("/")
    assert response.status_code == 401
    assert response.get_data() == b""


def test_missing_cookie_custom_handler(key):
    client = build(key, not_authenticated_handler=lambda request: Response("login", status=302))
    response = client.get("/")
    assert response.status_code == 302
    assert response.get_data(as_text=True) == "login"


def test_valid_cookie_sets_identity(key):
    response = build(key).get("/", headers=cookie_header(make_token(key)))
    assert response.status_code == 200
    assert response.get_data(as_text=True) == "alice"


def test_after_handler_receives_identity(key):
    calls = []
    client = build(key, after_handler=lambda request, identity: calls.append(identity))
    client.get("/", headers=cookie_header(make_token(key, "bob")))
    assert len(calls) == 1
    assert calls[0].username == "bob"
    assert calls[0].id == USER_ID


def test_unverified_cookie_records_error(key):
    other = auth.new_signing_key_curve(ec.SECP256R1())
    seen = []
    client = build(key, app=identity_app(seen=seen))
    response = client.get("/", headers=cookie_header(make_token(other)))
    assert response.status_code == 200
    errors = seen[0][ERRORS_KEY]
    assert len(errors) == 1
    assert isinstance(errors[0], auth.KeyNotVerifiedError)


def test_failing_factory_leaves_request_anonymous(key):
    calls = []

    def refusing(request, cookie_value):
        raise LookupError("no such user")

    client = build(key, factory=refusing, after_handler=lambda request, identity: calls.append(identity))
    response = client.get("/", headers=cookie_header(make_token(key)))
    assert response.get_data(as_text=True) == "anonymous"
    assert calls == [None]


def test_custom_context_key(key):
    client = build(key, app=identity_app("user"), context_key="user")
    response = client.get("/", headers=cookie_header(make_token(key)))
    assert response.get_data(as_text=True) == "alice"


def test_custom_cookie_name(key):
    auth_config = auth.AuthConfig(cookie_name="session", signing_key=key)
    client = build(key, auth_config=auth_config)
    assert client.get("/", headers=cookie_header(make_token(key), "session")).get_data(as_text=True) == "alice"
    assert client.get("/", headers=cookie_header(make_token(key))).status_code == 401


def test_factory_is_required(key):
    with pytest.raises(ValueError):
        AuthenticationMiddleware(identity_app(), auth_config=auth.AuthConfig(signing_key=key))


def test_auth_config_is_required():
    with pytest.raises(ValueError):
        AuthenticationMiddleware(identity_app(), factory=factory)