import pprint
import urllib.parse
from dataclasses import dataclass, field

from asgiref.typing import ASGIReceiveCallable, ASGISendCallable, HTTPScope

from asgi_bucket_dav.constants import DAVHeaders, DAVMethod
from asgi_bucket_dav.helpers import receive_all_data_in_one_call


@dataclass(slots=True)
class DAVRequest:
    """Information from Request
    Server => DAVAuth => WebDAV => DAVStorage
    """

    # init data
    scope: HTTPScope
    receive: ASGIReceiveCallable
    send: ASGISendCallable

    # client info
    client_ip_address: str = field(init=False)
    client_user_agent: str = field(init=False)

    # header's info ---
    method: DAVMethod = field(init=False)
    raw_method: str = field(init=False)
    headers: DAVHeaders = field(init=False)
    path: str = field(init=False)
    # backend resource key, path without leading/trailing "/"
    key: str = field(init=False)

    # raw header value, interpreted by the method handler
    depth: str | None = None
    timeout: str | None = None
    origin: str | None = None
    authorization: bytes | None = None
    content_range: bool = False

    # body's info ---
    body: bytes | None = None

    def __post_init__(self) -> None:
        self.raw_method = self.scope.get("method", "UNKNOWN")
        self.method = DAVMethod(self.raw_method)
        self.headers = DAVHeaders(self.scope.get("headers", []))
        user_agent = self.headers.get(b"user-agent")
        if user_agent is None:
            self.client_user_agent = ""
        else:
            self.client_user_agent = user_agent.decode("utf-8")

        self._parser_client_ip_address()

        # path
        raw_path = self.scope.get("path", "")
        self.path = urllib.parse.unquote(raw_path, encoding="utf-8")
        if len(self.path) == 0:
            self.path = "/"
        self.key = self.path.strip("/")

        self.depth = self._get_header_str(b"depth")
        self.timeout = self._get_header_str(b"timeout")
        self.origin = self._get_header_str(b"origin")
        self.authorization = self.headers.get(b"authorization")

        # https://developer.mozilla.org/zh-CN/docs/Web/HTTP/Headers/Range
        self.content_range = b"range" in self.headers

    def _get_header_str(self, name: bytes) -> str | None:
        value = self.headers.get(name)
        if value is None:
            return None

        return value.decode("utf-8")

    def _parser_client_ip_address(self) -> None:
        ip_address = self.headers.get(b"x-real-ip")
        if ip_address is not None:
            self.client_ip_address = ip_address.decode("utf-8")
            return

        ip_address = self.headers.get(b"x-forwarded-for")
        if ip_address is not None:
            self.client_ip_address = ip_address.decode("utf-8").split(",")[0]
            return

        ip_address_client = self.scope.get("client")
        if ip_address_client is None:
            self.client_ip_address = ""
        else:
            self.client_ip_address = ip_address_client[0]

    @property
    def path_is_dir(self) -> bool:
        return self.path.endswith("/")

    async def read_body(self) -> bytes:
        if self.body is None:
            self.body = await receive_all_data_in_one_call(self.receive)

        return self.body

    def __repr__(self) -> str:
        simple_fields = ["method", "path", "key"]
        if self.method in (DAVMethod.PROPFIND, DAVMethod.LOCK):
            simple_fields += ["depth", "timeout"]
        elif self.method == DAVMethod.GET:
            simple_fields += ["content_range"]

        simple = "|".join([str(getattr(self, name)) for name in simple_fields])
        scope = pprint.pformat(self.scope)
        return f"{simple}\n{scope}"
