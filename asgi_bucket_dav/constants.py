from collections.abc import AsyncGenerator, Iterable
from dataclasses import dataclass
from enum import Enum, auto
from time import time
from typing import Any, TypeAlias

import arrow

# Common ---

ASGIHeaders: TypeAlias = Iterable[tuple[bytes, bytes]]


class DAVUpperEnumAbc(Enum):
    """自动大写化枚举类
    .name 可以是:大写/小写/大小写混合
    .value 为 .name 的自动大写化的字符串

    默认值为空,需要继承实现;默认不会自动匹配默认值
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        self._value_ = self._name_.upper()

    @classmethod
    def _missing_(cls, value: Any) -> "DAVUpperEnumAbc":
        if not isinstance(value, str):
            raise ValueError(f"Invalid {cls.__name__} value: {value}")

        try:
            return cls[value.upper()]
        except KeyError:
            return cls[cls.default_value(value).upper()]

    @classmethod
    def default_value(cls, value: Any) -> str:
        raise ValueError(f"Invalid {cls.__name__} value: {value}")


# WebDAV protocol ---
class DAVMethod(DAVUpperEnumAbc):
    # default/fallback
    UNKNOWN = auto()

    # rfc4918:9.1
    PROPFIND = auto()
    # rfc4918:9.2
    PROPPATCH = auto()
    # rfc4918:9.3
    MKCOL = auto()
    # rfc4918:9.4
    GET = auto()
    HEAD = auto()
    # rfc4918:9.6
    DELETE = auto()
    # rfc4918:9.7
    PUT = auto()
    # rfc4918:9.8
    COPY = auto()
    # rfc4918:9.9
    MOVE = auto()
    # rfc4918:9.10
    LOCK = auto()
    # rfc4918:9.11
    UNLOCK = auto()
    OPTIONS = auto()

    @classmethod
    def default_value(cls, value: Any) -> str:
        return "UNKNOWN"


# advertised by OPTIONS(Allow) and CORS(Access-Control-Allow-Methods)
DAV_METHODS = (
    "GET",
    "HEAD",
    "PUT",
    "DELETE",
    "OPTIONS",
    "MKCOL",
    "PROPFIND",
    "PROPPATCH",
    "COPY",
    "MOVE",
    "LOCK",
    "UNLOCK",
)

CORS_ALLOW_HEADERS = (
    "Authorization",
    "Content-Type",
    "Depth",
    "Overwrite",
    "Destination",
    "Range",
)

CORS_EXPOSE_HEADERS = (
    "Content-Length",
    "Content-Type",
    "Content-Range",
    "Dav",
    "Date",
    "ETag",
    "Last-Modified",
    "Location",
    "Lock-Token",
    "X-WebDAV-Status",
)

DEFAULT_CORS_PREFLIGHT_MAX_AGE = 86400  # x second


class DAVHeaders:
    data: dict[bytes, bytes]

    def __init__(self, data: ASGIHeaders | None = None):
        if data is None:
            self.data = dict()
            return

        self.data = dict(data)

    def get(self, key: bytes, default: bytes | None = None) -> bytes | None:
        return self.data.get(key, default)

    def __getitem__(self, key: bytes) -> bytes | None:
        return self.data.get(key)

    def __setitem__(self, key: bytes, value: bytes) -> None:
        self.data[key] = value

    def __contains__(self, item: bytes) -> bool:
        return item in self.data

    def update(self, new_data: dict[bytes, bytes]) -> None:
        self.data.update(new_data)

    def list(self) -> list[tuple[bytes, bytes]]:
        return list(self.data.items())

    def __repr__(self) -> str:  # pragma: no cover
        return self.data.__repr__()


class DAVDepth(Enum):
    """
    https://www.rfc-editor.org/rfc/rfc4918#section-10.2
        Depth = "Depth" ":" ("0" | "1" | "infinity")
    """

    d0 = "0"
    d1 = "1"
    infinity = "infinity"


class DAVTime:
    timestamp: float

    def __init__(self, timestamp: float | None = None):
        if timestamp is None:
            timestamp = time()

        self.timestamp = timestamp
        self.arrow = arrow.get(timestamp)

    def iso_8601(self) -> str:
        return self.arrow.format(arrow.FORMAT_RFC3339)

    def http_date(self) -> str:
        # https://datatracker.ietf.org/doc/html/rfc7232#section-2.2
        # Last-Modified: Tue, 15 Nov 1994 12:45:26 GMT
        return self.arrow.to("UTC").format("ddd, DD MMM YYYY HH:mm:ss [GMT]")

    def dav_creation_date(self) -> str:
        # format borrowed from Apache mod_webdav
        return self.arrow.to("UTC").format("YYYY-MM-DDTHH:mm:ss[Z]")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DAVTime):
            return False

        return self.timestamp == other.timestamp

    def __repr__(self) -> str:
        return self.arrow.isoformat()


# Storage ---
DEFAULT_STORAGE_URI = "memory:///"
DEFAULT_STORAGE_LIST_PAGE_SIZE = 1000

DEFAULT_FILE_CONTENT_TYPE = "application/octet-stream"
DEFAULT_DIR_CONTENT_TYPE = "httpd/unix-directory"

# custom metadata key, value is a local name of element in "DAV:"
CUSTOM_METADATA_RESOURCE_TYPE = "resource_type"


# Response ---
RESPONSE_DATA_BLOCK_SIZE = 64 * 1024

# (body<bytes>, more_body<bool>)
DAVResponseBodyGenerator: TypeAlias = AsyncGenerator[tuple[bytes, bool], None]


class DAVResponseContentType(Enum):
    ANY = 0
    HTML = 1
    XML = 2


# Authentication ---

DEFAULT_USERNAME = "username"
DEFAULT_PASSWORD = "password"
DEFAULT_AUTH_REALM = "webdav"


# Development ---


class LoggingLevel(Enum):
    CRITICAL = "CRITICAL"
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"
    DEBUG = "DEBUG"


@dataclass(slots=True)
class AppEntryParameters:
    bind_host: str | None = None
    bind_port: int | None = None

    config_file: str | None = None
    admin_user: tuple[str, str] | None = None
    storage_uri: str | None = None

    logging_display_datetime: bool = True
    logging_use_colors: bool = True
