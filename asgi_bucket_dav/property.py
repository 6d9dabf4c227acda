import urllib.parse
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from asgi_bucket_dav.constants import (
    CUSTOM_METADATA_RESOURCE_TYPE,
    DEFAULT_DIR_CONTENT_TYPE,
    DEFAULT_FILE_CONTENT_TYPE,
    DAVTime,
)
from asgi_bucket_dav.helpers import get_xml_from_dict
from asgi_bucket_dav.storage.base import DAVObject

"""
https://tools.ietf.org/html/rfc4918#section-15
15.  DAV Properties

    creationdate, displayname, getcontentlanguage, getcontentlength,
    getcontenttype, getetag, getlastmodified, lockdiscovery, resourcetype,
    supportedlock
"""

_SUPPORTED_LOCK = {
    "lockentry": [
        {"lockscope": {"exclusive": None}, "locktype": {"write": None}},
        {"lockscope": {"shared": None}, "locktype": {"write": None}},
    ]
}


def _parser_resource_type(value: str | None) -> str | None:
    """custom metadata "resource_type": "collection" or "<collection />" """
    if value is None:
        return None

    value = value.strip().strip("<>/").strip()
    if len(value) == 0:
        return None

    return value


@dataclass
class DAVProperty:
    """one <response> in <multistatus>, file or (synthetic) directory"""

    href: str

    creation_date: DAVTime
    last_modified: DAVTime
    content_type: str
    resource_type: str | None = None

    content_length: int | None = None
    etag: str | None = None

    @classmethod
    def from_object(cls, href: str, dav_object: DAVObject | None) -> "DAVProperty":
        if dav_object is None:
            # directory defaults
            dav_time = DAVTime()
            return cls(
                href=href,
                creation_date=dav_time,
                last_modified=dav_time,
                content_type=DEFAULT_DIR_CONTENT_TYPE,
                resource_type="collection",
            )

        content_type = dav_object.http_metadata.content_type
        if content_type is None:
            content_type = DEFAULT_FILE_CONTENT_TYPE

        return cls(
            href=href,
            creation_date=dav_object.uploaded,
            last_modified=dav_object.uploaded,
            content_type=content_type,
            resource_type=_parser_resource_type(
                dav_object.custom_metadata.get(CUSTOM_METADATA_RESOURCE_TYPE)
            ),
            content_length=dav_object.size,
            etag=dav_object.etag,
        )

    def as_dict(self) -> dict[str, Any]:
        prop: dict[str, Any] = {
            "resourcetype": (
                None if self.resource_type is None else {self.resource_type: None}
            ),
            "creationdate": self.creation_date.dav_creation_date(),
        }
        if self.content_length is not None:
            prop["getcontentlength"] = str(self.content_length)
        prop["getlastmodified"] = self.last_modified.http_date()
        if self.etag is not None:
            prop["getetag"] = self.etag

        # lock is not really implemented, but clients(eg: macOS Finder) need it
        prop["supportedlock"] = _SUPPORTED_LOCK
        prop["lockdiscovery"] = None
        prop["getcontenttype"] = self.content_type

        return {
            "href": urllib.parse.quote(self.href, encoding="utf-8"),
            "propstat": {
                "prop": prop,
                "status": "HTTP/1.1 200 OK",
            },
        }


def create_multistatus_xml(properties: Iterable[DAVProperty]) -> bytes:
    data = {
        "multistatus": {
            "@xmlns": "DAV:",
            "response": [dav_property.as_dict() for dav_property in properties],
        }
    }
    return get_xml_from_dict(data)


def create_lock_xml(depth: str, timeout: str) -> bytes:
    """canned lockdiscovery, nothing is recorded and no lock token is issued"""
    data = {
        "D:prop": {
            "@xmlns:D": "DAV:",
            "D:lockdiscovery": {
                "D:activelock": {
                    "D:locktype": {"D:write": None},
                    "D:lockscope": {"D:exclusive": None},
                    "D:depth": depth,
                    "D:owner": {"D:href": "http://www.apple.com/webdav_fs/"},
                    "D:timeout": timeout,
                }
            },
        }
    }
    return get_xml_from_dict(data)
