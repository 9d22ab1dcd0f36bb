import pytest
from werkzeug.test import Client
from werkzeug.wrappers import Request, Response

from pommikit.middleware.etag import ETagMiddleware, compute_etag

HELLO_TAG = '"13-1831710635"'


def _hello(environ, start_response):
    return Response("Hello, World!")(environ, start_response)


def test_compute_etag_values():
    assert compute_etag(b"Hello, World!") == HELLO_TAG
    assert compute_etag(b"Hello, World!", weak=True) == "W/" + HELLO_TAG
    assert compute_etag(b"") == '"0-0"'


def test_next_skips_middleware():
    def not_found(environ, start_response):
        return Response(status=404)(environ, start_response)

    client = Client(ETagMiddleware(not_found, skip=lambda request: True))
    response = client.get("/")
    assert response.status_code == 404
    assert "ETag" not in response.headers


def test_not_status_ok():
    def created(environ, start_response):
        return Response(status=201)(environ, start_response)

    response = Client(ETagMiddleware(created)).get("/")
    assert response.status_code == 201
    assert "ETag" not in response.headers


def test_no_body():
    def empty(environ, start_response):
        return Response(b"")(environ, start_response)

    response = Client(ETagMiddleware(empty)).get("/")
    assert response.status_code == 200
    assert response.headers["ETag"] == compute_etag(b"")


@pytest.mark.parametrize(
    "header, matched",
    [(None, False), ('"non-match"', False), (HELLO_TAG, True)],
)
def test_new_etag(header, matched):
    headers = {"If-None-Match": header} if header else {}
    response = Client(ETagMiddleware(_hello)).get("/", headers=headers)
    if matched:
        assert response.status_code == 304
        assert response.data == b""
    else:
        assert response.status_code == 200
        assert response.headers["ETag"] == HELLO_TAG
        assert response.data == b"Hello, World!"


@pytest.mark.parametrize(
    "header, matched",
    [(None, False), ('W/"non-match"', False), ("W/" + HELLO_TAG, True)],
)
def test_weak_etag(header, matched):
    headers = {"If-None-Match": header} if header else {}
    response = Client(ETagMiddleware(_hello, weak=True)).get("/", headers=headers)
    if matched:
        assert response.status_code == 304
        assert response.data == b""
    else:
        assert response.status_code == 200
        assert response.headers["ETag"] == "W/" + HELLO_TAG


def test_weak_client_tag_matches_strong_etag():
    response = Client(ETagMiddleware(_hello)).get("/", headers={"If-None-Match": "W/" + HELLO_TAG})
    assert response.status_code == 304
    assert response.data == b""


def _custom(environ, start_response):
    request = Request(environ)
    if request.headers.get("If-None-Match") == '"custom"':
        response = Response(status=304)
    else:
        response = Response("Hello, World!")
    response.headers["ETag"] = '"custom"'
    return response(environ, start_response)


@pytest.mark.parametrize(
    "header, matched",
    [(None, False), ('"non-match"', False), ('"custom"', True)],
)
def test_custom_etag(header, matched):
    headers = {"If-None-Match": header} if header else {}
    response = Client(ETagMiddleware(_custom)).get("/", headers=headers)
    if matched:
        assert response.status_code == 304
        assert response.data == b""
    else:
        assert response.status_code == 200
        assert response.headers["ETag"] == '"custom"'


def test_custom_etag_put():
    def app(environ, start_response):
        request = Request(environ)
        if request.headers.get("If-Match") != '"custom"':
            response = Response(status=412)
        else:
            response = Response("Hello, World!")
        response.headers["ETag"] = '"custom"'
        return response(environ, start_response)

    response = Client(ETagMiddleware(app)).put("/", headers={"If-Match": '"non-match"'})
    assert response.status_code == 412