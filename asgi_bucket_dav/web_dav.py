from logging import getLogger

from asgi_bucket_dav.constants import (
    DAV_METHODS,
    DEFAULT_FILE_CONTENT_TYPE,
    DAVDepth,
    DAVMethod,
    DAVResponseContentType,
)
from asgi_bucket_dav.exception import DAVExceptionNotImplemented
from asgi_bucket_dav.hierarchy import synthesize_children
from asgi_bucket_dav.property import (
    DAVProperty,
    create_lock_xml,
    create_multistatus_xml,
)
from asgi_bucket_dav.request import DAVRequest
from asgi_bucket_dav.response import (
    DAVResponse,
    DAVResponseError,
    DAVResponseMethodNotAllowed,
)
from asgi_bucket_dav.storage import DAVHttpMetadata, DAVObject, DAVStorage

logger = getLogger(__name__)

_DIR_NOT_FOUND_PAGE = (
    b'<!DOCTYPE HTML PUBLIC "-//IETF//DTD HTML 2.0//EN">'
    b"<html><head><title>404 Not Found</title></head><body>"
    b"<h1>Not Found</h1><p>The requested URL was not found on this server.</p>"
    b"</body></html>"
)

# request header => DAVHttpMetadata's field
_PUT_HTTP_METADATA_HEADERS = (
    (b"content-type", "content_type"),
    (b"content-language", "content_language"),
    (b"content-disposition", "content_disposition"),
    (b"content-encoding", "content_encoding"),
    (b"cache-control", "cache_control"),
)


def get_response_headers(dav_object: DAVObject) -> dict[bytes, bytes]:
    http_metadata = dav_object.http_metadata
    content_type = http_metadata.content_type
    if content_type is None:
        content_type = DEFAULT_FILE_CONTENT_TYPE

    headers = {
        b"Content-Type": content_type.encode("utf-8"),
        b"ETag": f'"{dav_object.etag}"'.encode("utf-8"),
        b"Last-Modified": dav_object.uploaded.http_date().encode("utf-8"),
    }
    for name, value in (
        (b"Content-Disposition", http_metadata.content_disposition),
        (b"Content-Encoding", http_metadata.content_encoding),
        (b"Content-Language", http_metadata.content_language),
        (b"Cache-Control", http_metadata.cache_control),
    ):
        if value is not None:
            headers[name] = value.encode("utf-8")

    if http_metadata.cache_expiry is not None:
        headers[b"Cache-Expires"] = http_metadata.cache_expiry.http_date().encode(
            "utf-8"
        )

    return headers


class WebDAV:
    """one handler per method, every handler is stateless

    Server => DAVAuth => WebDAV.distribute() => DAVStorage
    """

    def __init__(self, storage: DAVStorage):
        self.storage = storage

    async def distribute(self, request: DAVRequest) -> DAVResponse:
        logger.debug(request)

        match request.method:
            # high freq interface ---
            case DAVMethod.HEAD:
                response = await self.do_head(request)
            case DAVMethod.GET:
                response = await self.do_get(request)
            case DAVMethod.PROPFIND:
                response = await self.do_propfind(request)
            case DAVMethod.LOCK:
                response = await self.do_lock(request)
            case DAVMethod.UNLOCK:
                response = await self.do_unlock(request)

            # low freq interface ---
            case DAVMethod.MKCOL:
                response = await self.do_mkcol(request)
            case DAVMethod.DELETE:
                response = await self.do_delete(request)
            case DAVMethod.PUT:
                response = await self.do_put(request)
            case DAVMethod.PROPPATCH | DAVMethod.COPY | DAVMethod.MOVE:
                raise DAVExceptionNotImplemented(
                    f"{request.method.value} is not implemented"
                )

            # other interface ---
            case DAVMethod.OPTIONS:
                response = await self.do_options(request)
            case _:
                response = DAVResponseMethodNotAllowed(request.raw_method)

        return response

    """
    https://datatracker.ietf.org/doc/html/rfc4918#section-9.4
    9.4.  GET, HEAD for Collections
    """

    async def do_get(self, request: DAVRequest) -> DAVResponse:
        if request.path_is_dir:
            # no directory browser
            return DAVResponse(200, content=_DIR_NOT_FOUND_PAGE)

        if request.content_range:
            return DAVResponseMethodNotAllowed("GET with Range")

        object_body = await self.storage.get(request.key)
        if object_body is None:
            return DAVResponseError(404, "Not Found")

        return DAVResponse(
            200,
            headers=get_response_headers(object_body.object),
            content=object_body.body,
            content_length=object_body.object.size,
            response_type=DAVResponseContentType.ANY,
        )

    async def do_head(self, request: DAVRequest) -> DAVResponse:
        response = await self.do_get(request)
        response.drop_body()
        return response

    """
    https://datatracker.ietf.org/doc/html/rfc4918#section-9.7
    9.7.  PUT Requirements
    """

    async def do_put(self, request: DAVRequest) -> DAVResponse:
        if len(request.key) == 0:
            return DAVResponseMethodNotAllowed(request.method)

        http_metadata = DAVHttpMetadata()
        for header_name, field_name in _PUT_HTTP_METADATA_HEADERS:
            value = request.headers.get(header_name)
            if value is not None:
                setattr(http_metadata, field_name, value.decode("utf-8"))

        content = await request.read_body()
        await self.storage.put(request.key, content, http_metadata=http_metadata)
        return DAVResponse(201)

    """
    https://datatracker.ietf.org/doc/html/rfc4918#section-9.6
    9.6.  DELETE Requirements
    """

    async def do_delete(self, request: DAVRequest) -> DAVResponse:
        if await self.storage.head(request.key) is not None:
            await self.storage.delete(request.key)
            return DAVResponse(204)

        # directory: every object under it, one by one
        dav_objects = await self.storage.list_all(self._get_dir_prefix(request.key))
        if len(dav_objects) == 0:
            return DAVResponseError(404, "Not Found")

        for dav_object in dav_objects:
            await self.storage.delete(dav_object.key)
        await self.storage.delete(request.key)

        logger.debug(f"Deleted {len(dav_objects)} object(s) under {request.path}")
        return DAVResponse(204)

    """
    https://datatracker.ietf.org/doc/html/rfc4918#section-9.3
    9.3.  MKCOL Method
    """

    async def do_mkcol(self, request: DAVRequest) -> DAVResponse:
        if len(request.key) == 0:
            return DAVResponseMethodNotAllowed(request.method)

        marker_key = request.key + "/"
        if await self.storage.head(marker_key) is not None:
            return DAVResponseError(409, "Conflict")

        await self.storage.put(marker_key, b"")
        return DAVResponse(201)

    async def do_options(self, request: DAVRequest) -> DAVResponse:
        headers = {
            b"DAV": b"1, 2",
            b"Allow": ", ".join(DAV_METHODS).encode("utf-8"),
        }
        return DAVResponse(
            204, headers=headers, response_type=DAVResponseContentType.ANY
        )

    """
    https://datatracker.ietf.org/doc/html/rfc4918#section-9.1
    9.1.  PROPFIND Method
    """

    async def do_propfind(self, request: DAVRequest) -> DAVResponse:
        depth = self._parser_depth(request.depth)
        match depth:
            case DAVDepth.infinity:
                return DAVResponseError(501, "Depth: infinity is not supported")
            case None:
                return DAVResponseError(403, f"Invalid Depth: {request.depth}")

        if len(request.key) != 0 and not request.path_is_dir:
            # without trailing slash: file only
            dav_object = await self.storage.head(request.key)
            if dav_object is None:
                return DAVResponseError(404, "Not Found")

            return self._create_propfind_response(
                [DAVProperty.from_object("/" + request.key, dav_object)]
            )

        properties = [DAVProperty.from_object("/" + request.key, None)]

        if depth == DAVDepth.d1:
            dav_objects = await self.storage.list_all(
                self._get_dir_prefix(request.key)
            )
            if len(dav_objects) == 0:
                return DAVResponseError(404, "Not Found")

            for entry in synthesize_children(request.key, dav_objects):
                properties.append(DAVProperty.from_object(entry.href, entry.object))

        return self._create_propfind_response(properties)

    @staticmethod
    def _parser_depth(depth: str | None) -> DAVDepth | None:
        if depth is None:
            return DAVDepth.d1

        try:
            return DAVDepth(depth.lower())
        except ValueError:
            return None

    @staticmethod
    def _get_dir_prefix(key: str) -> str:
        if len(key) == 0:
            return ""

        return key + "/"

    @staticmethod
    def _create_propfind_response(properties: list[DAVProperty]) -> DAVResponse:
        return DAVResponse(
            200,
            content=create_multistatus_xml(properties),
            response_type=DAVResponseContentType.XML,
        )

    """
    https://datatracker.ietf.org/doc/html/rfc4918#section-9.10
    9.10.  LOCK Method

    Advisory only: no lock table, no lock token, every client may still write.
    """

    async def do_lock(self, request: DAVRequest) -> DAVResponse:
        depth = request.depth if request.depth is not None else "0"
        timeout = request.timeout if request.timeout is not None else "Infinite"

        return DAVResponse(
            200,
            content=create_lock_xml(depth, timeout),
            response_type=DAVResponseContentType.XML,
        )

    async def do_unlock(self, request: DAVRequest) -> DAVResponse:
        return DAVResponse(204)
