import pprint
from dataclasses import dataclass, field
from logging import getLogger

from asgi_bucket_dav.constants import (
    DAVMethod,
    DAVResponseBodyGenerator,
    DAVResponseContentType,
)
from asgi_bucket_dav.helpers import (
    empty_data_generator,
    get_data_generator_from_content,
)
from asgi_bucket_dav.request import DAVRequest

logger = getLogger(__name__)

_ERROR_PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
  <head>
    <meta charset="UTF-8" />
    <title>Error</title>
  </head>
  <body>
    <h1>{} {}</h1>
  </body>
</html>"""


@dataclass(slots=True)
class DAVResponse:
    """WebDAV method handler => Server"""

    status: int
    headers: dict[bytes, bytes] = field(default_factory=dict)

    content: bytes | DAVResponseBodyGenerator = b""
    content_body_generator: DAVResponseBodyGenerator = field(init=False)
    content_length: int | None = None

    response_type: DAVResponseContentType = DAVResponseContentType.HTML

    def __post_init__(self) -> None:
        if self.response_type == DAVResponseContentType.HTML:
            self.headers.setdefault(b"Content-Type", b"text/html")
        elif self.response_type == DAVResponseContentType.XML:
            self.headers.setdefault(b"Content-Type", b"text/xml")

        if isinstance(self.content, bytes):
            self.content_body_generator = get_data_generator_from_content(
                self.content
            )
            if self.content_length is None:
                self.content_length = len(self.content)
        else:
            self.content_body_generator = self.content

    def drop_body(self) -> None:
        """keep status and headers, for HEAD"""
        if self.content_length is not None:
            self.headers[b"Content-Length"] = str(self.content_length).encode(
                "utf-8"
            )

        self.content = b""
        self.content_body_generator = empty_data_generator()
        self.content_length = None

    async def get_content(self) -> bytes:
        content = b""
        async for data, more_body in self.content_body_generator:
            content += data
            if not more_body:
                break

        return content

    async def send_in_one_call(self, request: DAVRequest) -> None:
        logger.debug(self.__repr__())
        if isinstance(self.content_length, int):
            self.headers[b"Content-Length"] = str(self.content_length).encode("utf-8")

        # send header
        await request.send(
            {
                "type": "http.response.start",
                "status": self.status,
                "headers": list(self.headers.items()),
                "trailers": False,
            }
        )
        # send data
        async for data, more_body in self.content_body_generator:
            await request.send(
                {
                    "type": "http.response.body",
                    "body": data,
                    "more_body": more_body,
                }
            )

    def __repr__(self) -> str:
        fields = [
            self.status,
            self.content_length,
            "bytes" if isinstance(self.content, bytes) else "DAVResponseBodyGenerator",
        ]
        s = "|".join([str(field) for field in fields])

        s += f"\n{pprint.pformat(self.headers)}"
        return s


class DAVResponseError(DAVResponse):
    """status with a short HTML page, e.g.: 404 Not Found"""

    def __init__(
        self, status: int, message: str, headers: dict[bytes, bytes] | None = None
    ):
        content = _ERROR_PAGE_TEMPLATE.format(status, message).encode("utf-8")
        super().__init__(
            status=status,
            headers=headers if headers is not None else dict(),
            content=content,
        )


class DAVResponseMethodNotAllowed(DAVResponseError):
    def __init__(self, method: DAVMethod | str):
        if isinstance(method, DAVMethod):
            method = method.value

        super().__init__(405, f"Method Not Allowed: {method}")
