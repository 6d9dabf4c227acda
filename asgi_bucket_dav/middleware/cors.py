import functools

from asgiref.typing import ASGIReceiveCallable, ASGISendCallable, Scope

from asgi_bucket_dav.constants import (
    CORS_ALLOW_HEADERS,
    CORS_EXPOSE_HEADERS,
    DAV_METHODS,
    DEFAULT_CORS_PREFLIGHT_MAX_AGE,
    DAVHeaders,
)

"""
- https://developer.mozilla.org/zh-CN/docs/Web/HTTP/CORS

- https://github.com/simonw/asgi-cors
- https://github.com/encode/starlette/blob/master/starlette/middleware/cors.py
"""


class ASGIMiddlewareCORS:
    """Decorate every HTTP response, the 401 one included.

    Access-Control-Allow-Origin mirrors the request's Origin, or "*" without it.
    Preflight requests are not short-circuited, OPTIONS is answered by WebDAV.
    """

    def __init__(
        self,
        app,
        allow_methods: list[str] = DAV_METHODS,
        allow_headers: list[str] = CORS_ALLOW_HEADERS,
        allow_credentials: bool = False,
        expose_headers: list[str] = CORS_EXPOSE_HEADERS,
        preflight_max_age: int = DEFAULT_CORS_PREFLIGHT_MAX_AGE,
    ) -> None:
        cors_headers = DAVHeaders()
        cors_headers.update(
            {
                b"Access-Control-Allow-Methods": ", ".join(allow_methods).encode(
                    "utf-8"
                ),
                b"Access-Control-Allow-Headers": ", ".join(allow_headers).encode(
                    "utf-8"
                ),
                b"Access-Control-Expose-Headers": ", ".join(expose_headers).encode(
                    "utf-8"
                ),
                b"Access-Control-Max-Age": str(preflight_max_age).encode("utf-8"),
            }
        )
        if allow_credentials:
            cors_headers[b"Access-Control-Allow-Credentials"] = b"true"

        self.app = app
        self.cors_headers = cors_headers

    async def __call__(
        self, scope: Scope, receive: ASGIReceiveCallable, send: ASGISendCallable
    ) -> None:
        if scope["type"] != "http":  # pragma: no cover
            await self.app(scope, receive, send)
            return

        request_headers = DAVHeaders(scope.get("headers"))
        origin = request_headers.get(b"origin")

        send = functools.partial(self.send, send=send, origin=origin)
        await self.app(scope, receive, send)

    async def send(self, message, send: ASGISendCallable, origin: bytes | None) -> None:
        if message["type"] != "http.response.start":
            await send(message)
            return

        headers = DAVHeaders(message.get("headers"))
        headers.update(self.cors_headers.data)
        if origin is None:
            headers[b"Access-Control-Allow-Origin"] = b"*"
        else:
            self.allow_explicit_origin(headers, origin)

        message["headers"] = headers.list()
        await send(message)

    @staticmethod
    def allow_explicit_origin(headers: DAVHeaders, origin: bytes) -> None:
        headers[b"Access-Control-Allow-Origin"] = origin
        headers[b"Vary"] = b"Origin"
