from base64 import b64encode

import pytest

from asgi_bucket_dav.auth import DAVAuth
from asgi_bucket_dav.config import Config

from .testkit_asgi import (
    PASSWORD,
    USERNAME,
    ASGITestClient,
    create_dav_request_object,
    get_webdav_app,
)

BASIC_AUTHORIZATION = "Basic " + b64encode(f"{USERNAME}:{PASSWORD}".encode()).decode()
BASIC_AUTHORIZATION_BAD_1 = "Basic bad basic_authorization"
BASIC_AUTHORIZATION_BAD_2 = "Basic " + b64encode(b"username-password").decode()
BASIC_AUTHORIZATION_BAD_3 = "BasicAAAAA"
BASIC_AUTHORIZATION_BAD_4 = BASIC_AUTHORIZATION.replace("Basic", "basic")
BASIC_AUTHORIZATION_BAD_5 = BASIC_AUTHORIZATION + " "
BASIC_AUTHORIZATION_BAD_6 = (
    "Basic " + b64encode(f"{USERNAME}:{PASSWORD}x".encode()).decode()
)


def get_dav_auth() -> DAVAuth:
    return DAVAuth(Config(username=USERNAME, password=PASSWORD))


def test_is_authorized():
    dav_auth = get_dav_auth()

    request = create_dav_request_object(
        headers={"Authorization": BASIC_AUTHORIZATION}
    )
    assert dav_auth.is_authorized(request)

    request = create_dav_request_object()
    assert not dav_auth.is_authorized(request)


@pytest.mark.parametrize(
    "authorization",
    [
        "",
        BASIC_AUTHORIZATION_BAD_1,
        BASIC_AUTHORIZATION_BAD_2,
        BASIC_AUTHORIZATION_BAD_3,
        BASIC_AUTHORIZATION_BAD_4,
        BASIC_AUTHORIZATION_BAD_5,
        BASIC_AUTHORIZATION_BAD_6,
    ],
)
def test_is_not_authorized(authorization):
    dav_auth = get_dav_auth()

    request = create_dav_request_object(headers={"Authorization": authorization})
    assert not dav_auth.is_authorized(request)


def test_create_response_401():
    response = get_dav_auth().create_response_401()

    assert response.status == 401
    assert response.headers[b"WWW-Authenticate"] == b'Basic realm="webdav"'


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "authorization",
    [None, BASIC_AUTHORIZATION_BAD_1, BASIC_AUTHORIZATION_BAD_2],
)
async def test_server_response_401(authorization):
    client = ASGITestClient(get_webdav_app())
    headers = dict()
    if authorization is not None:
        headers[b"authorization"] = authorization.encode("utf-8")

    for method in ("GET", "PUT", "PROPFIND", "OPTIONS", "DELETE"):
        response = await client.request_method(method, "/docs/a.txt", headers)
        assert response.status_code == 401
        assert response.get_header("WWW-Authenticate") == 'Basic realm="webdav"'


@pytest.mark.asyncio
async def test_server_authorized():
    client = ASGITestClient(get_webdav_app())
    response = await client.options(
        "/", headers={b"authorization": BASIC_AUTHORIZATION.encode("utf-8")}
    )
    assert response.status_code == 204

    client = ASGITestClient(
        get_webdav_app({"username": "user2", "password": "pass2"}),
        username="user2",
        password="pass2",
    )
    response = await client.options("/")
    assert response.status_code == 204

    response = await client.options(
        "/", headers={b"authorization": BASIC_AUTHORIZATION.encode("utf-8")}
    )
    assert response.status_code == 401
