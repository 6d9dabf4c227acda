import pytest
import xmltodict
from icecream import ic

from asgi_bucket_dav.exception import DAVExceptionNotImplemented
from asgi_bucket_dav.web_dav import WebDAV

from .testkit_asgi import (
    ASGITestClient,
    CallCountingStorage,
    create_dav_request_object,
)


def get_hrefs(response_text: str) -> list[str]:
    data = xmltodict.parse(response_text)
    responses = data["multistatus"]["response"]
    if isinstance(responses, dict):
        responses = [responses]

    return [item["href"] for item in responses]


async def put_docs(client: ASGITestClient):
    for path in ("/docs/a.txt", "/docs/b.txt", "/docs/sub/c.txt"):
        response = await client.put(path, path.encode("utf-8"))
        assert response.status_code == 201


@pytest.mark.asyncio
async def test_put_then_get(client):
    response = await client.put(
        "/hello.txt", b"Hello, World!", headers={b"content-type": b"text/plain"}
    )
    assert response.status_code == 201

    response = await client.get("/hello.txt")
    assert response.status_code == 200
    assert response.data == b"Hello, World!"
    assert response.get_header("Content-Type") == "text/plain"
    assert response.get_header("Content-Length") == "13"
    assert response.get_header("ETag") is not None
    assert response.get_header("Last-Modified").endswith("GMT")


@pytest.mark.asyncio
async def test_put_http_metadata(client):
    await client.put(
        "/report.pdf",
        b"%PDF",
        headers={
            b"content-disposition": b'attachment; filename="report.pdf"',
            b"cache-control": b"no-cache",
        },
    )

    response = await client.get("/report.pdf")
    assert response.status_code == 200
    assert response.get_header("Content-Type") == "application/octet-stream"
    assert (
        response.get_header("Content-Disposition")
        == 'attachment; filename="report.pdf"'
    )
    assert response.get_header("Cache-Control") == "no-cache"


@pytest.mark.asyncio
async def test_put_empty_key(client):
    response = await client.put("/", b"root")
    assert response.status_code == 405


@pytest.mark.asyncio
async def test_get_and_head(client):
    response = await client.get("/not-exist.txt")
    assert response.status_code == 404

    # no directory browser
    response = await client.get("/docs/")
    assert response.status_code == 200
    assert response.get_header("Content-Type") == "text/html"
    assert "Not Found" in response.text

    await client.put("/hello.txt", b"Hello, World!")
    response = await client.head("/hello.txt")
    assert response.status_code == 200
    assert response.data == b""
    assert response.get_header("Content-Length") == "13"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "range_value", [b"bytes=0-1", b"bytes=100-", b"bytes=-5", b"invalid"]
)
async def test_get_with_range(client, range_value):
    await client.put("/hello.txt", b"Hello, World!")

    response = await client.get("/hello.txt", headers={b"range": range_value})
    assert response.status_code == 405


@pytest.mark.asyncio
async def test_mkcol(client):
    response = await client.mkcol("/photos")
    assert response.status_code == 201

    response = await client.mkcol("/photos")
    assert response.status_code == 409

    response = await client.mkcol("/photos/")
    assert response.status_code == 409

    response = await client.mkcol("/")
    assert response.status_code == 405

    # empty directory, only the marker
    response = await client.propfind("/photos/", depth="1")
    assert response.status_code == 200
    assert get_hrefs(response.text) == ["/photos"]


@pytest.mark.asyncio
async def test_delete_leaf(client):
    await put_docs(client)

    response = await client.delete("/docs/a.txt")
    assert response.status_code == 204

    assert (await client.get("/docs/a.txt")).status_code == 404
    assert (await client.get("/docs/b.txt")).status_code == 200
    assert (await client.get("/docs/sub/c.txt")).status_code == 200


@pytest.mark.asyncio
async def test_delete_prefix(client):
    await put_docs(client)
    await client.put("/docsfoo", b"sibling")
    await client.mkcol("/docs")

    response = await client.delete("/docs")
    assert response.status_code == 204

    for path in ("/docs/a.txt", "/docs/b.txt", "/docs/sub/c.txt"):
        assert (await client.get(path)).status_code == 404
    assert (await client.mkcol("/docs")).status_code == 201
    assert (await client.get("/docsfoo")).status_code == 200


@pytest.mark.asyncio
async def test_delete_not_found(client):
    response = await client.delete("/nothing")
    assert response.status_code == 404

    response = await client.delete("/nothing/")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_propfind_depth_0_file(client):
    await client.put("/docs/a.txt", b"aaa", headers={b"content-type": b"text/plain"})

    response = await client.propfind("/docs/a.txt", depth="0")
    assert response.status_code == 200
    assert response.get_header("Content-Type") == "text/xml"

    data = xmltodict.parse(response.text)
    ic(data)
    item = data["multistatus"]["response"]
    assert isinstance(item, dict)
    assert item["href"] == "/docs/a.txt"

    prop = item["propstat"]["prop"]
    assert prop["getcontentlength"] == "3"
    assert prop["getcontenttype"] == "text/plain"
    assert prop["resourcetype"] is None
    assert item["propstat"]["status"] == "HTTP/1.1 200 OK"


@pytest.mark.asyncio
async def test_propfind_depth_1(client):
    await put_docs(client)

    response = await client.propfind("/docs/", depth="1")
    assert response.status_code == 200
    assert get_hrefs(response.text) == [
        "/docs",
        "/docs/a.txt",
        "/docs/b.txt",
        "/docs/sub",
    ]

    # default depth is 1
    response = await client.propfind("/docs/")
    assert response.status_code == 200
    assert len(get_hrefs(response.text)) == 4

    response = await client.propfind("/", depth="1")
    assert response.status_code == 200
    assert get_hrefs(response.text) == ["/", "/docs"]


@pytest.mark.asyncio
async def test_propfind_synthetic_directory(client):
    await put_docs(client)

    response = await client.propfind("/docs/", depth="1")
    data = xmltodict.parse(response.text)
    items = {item["href"]: item for item in data["multistatus"]["response"]}

    prop = items["/docs/sub"]["propstat"]["prop"]
    assert "collection" in prop["resourcetype"]
    assert prop["getcontenttype"] == "httpd/unix-directory"
    assert "getcontentlength" not in prop
    assert "getetag" not in prop


@pytest.mark.asyncio
async def test_propfind_not_found(client):
    response = await client.propfind("/empty/", depth="1")
    assert response.status_code == 404

    response = await client.propfind("/empty", depth="1")
    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize("depth", ["0", "1", None])
async def test_propfind_no_trailing_slash_not_found(client, depth):
    await put_docs(client)

    # "docs" is only a prefix, not an object
    for path in ("/missing", "/docs", "/docs/sub"):
        response = await client.propfind(path, depth=depth)
        assert response.status_code == 404

    response = await client.propfind("/docs/a.txt", depth=depth)
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_propfind_depth_0_directory(client):
    response = await client.propfind("/empty/", depth="0")
    assert response.status_code == 200
    assert get_hrefs(response.text) == ["/empty"]


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/docs/", "/", "/nothing/", "/docs/a.txt"])
async def test_propfind_invalid_depth(client, path):
    await put_docs(client)

    response = await client.propfind(path, depth="infinity")
    assert response.status_code == 501

    response = await client.propfind(path, depth="2")
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_propfind_depth_case_insensitive(client):
    await put_docs(client)

    for depth in ("Infinity", "INFINITY"):
        response = await client.propfind("/docs/", depth=depth)
        assert response.status_code == 501


@pytest.mark.asyncio
async def test_options(client):
    response = await client.options("/docs/a.txt")
    assert response.status_code == 204
    assert response.get_header("DAV") == "1, 2"

    allow = response.get_header("Allow").split(", ")
    for method in ("PUT", "LOCK", "UNLOCK", "PROPFIND", "MKCOL"):
        assert method in allow


@pytest.mark.asyncio
async def test_options_without_storage_call():
    storage = CallCountingStorage()
    web_dav = WebDAV(storage)

    for path in ("/", "/docs", "/docs/a.txt"):
        response = await web_dav.distribute(create_dav_request_object("OPTIONS", path))
        assert response.status == 204
        assert response.headers[b"DAV"] == b"1, 2"

    assert storage.calls == []


@pytest.mark.asyncio
async def test_lock_and_unlock(client):
    response = await client.request_method("LOCK", "/docs/a.txt")
    assert response.status_code == 200

    data = xmltodict.parse(response.text)
    active_lock = data["D:prop"]["D:lockdiscovery"]["D:activelock"]
    assert active_lock["D:depth"] == "0"
    assert active_lock["D:timeout"] == "Infinite"

    response = await client.request_method(
        "LOCK",
        "/docs/a.txt",
        headers={b"depth": b"infinity", b"timeout": b"Second-3600"},
    )
    data = xmltodict.parse(response.text)
    active_lock = data["D:prop"]["D:lockdiscovery"]["D:activelock"]
    assert active_lock["D:depth"] == "infinity"
    assert active_lock["D:timeout"] == "Second-3600"

    response = await client.request_method("UNLOCK", "/docs/a.txt")
    assert response.status_code == 204


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["PROPPATCH", "COPY", "MOVE"])
async def test_not_implemented(client, method):
    response = await client.request_method(method, "/docs/a.txt")
    assert response.status_code == 501

    web_dav = WebDAV(CallCountingStorage())
    with pytest.raises(DAVExceptionNotImplemented):
        await web_dav.distribute(create_dav_request_object(method, "/docs/a.txt"))


@pytest.mark.asyncio
async def test_unknown_method(client):
    response = await client.request_method("PATCH", "/docs/a.txt")
    assert response.status_code == 405


@pytest.mark.asyncio
async def test_file_and_marker_coexist(client):
    await client.mkcol("/notes")
    await client.put("/notes", b"a file named notes")

    # without trailing slash: the file
    response = await client.propfind("/notes", depth="1")
    assert get_hrefs(response.text) == ["/notes"]

    # with trailing slash: the directory
    response = await client.propfind("/notes/", depth="1")
    assert get_hrefs(response.text) == ["/notes"]
    data = xmltodict.parse(response.text)
    assert "collection" in data["multistatus"]["response"]["propstat"]["prop"][
        "resourcetype"
    ]

    # DELETE prefers the file
    assert (await client.delete("/notes")).status_code == 204
    assert (await client.get("/notes")).status_code == 404
    assert (await client.mkcol("/notes")).status_code == 409
