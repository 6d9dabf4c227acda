from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger

from asgi_bucket_dav.constants import (
    DEFAULT_STORAGE_LIST_PAGE_SIZE,
    DAVResponseBodyGenerator,
    DAVTime,
)

logger = getLogger(__name__)


@dataclass
class DAVHttpMetadata:
    content_type: str | None = None
    content_language: str | None = None
    content_disposition: str | None = None
    content_encoding: str | None = None
    cache_control: str | None = None
    cache_expiry: DAVTime | None = None

    def as_dict(self) -> dict[str, str | float]:
        data = dict()
        for name in (
            "content_type",
            "content_language",
            "content_disposition",
            "content_encoding",
            "cache_control",
        ):
            value = getattr(self, name)
            if value is not None:
                data[name] = value

        if self.cache_expiry is not None:
            data["cache_expiry"] = self.cache_expiry.timestamp

        return data

    @classmethod
    def from_dict(cls, data: dict) -> "DAVHttpMetadata":
        cache_expiry = data.get("cache_expiry")
        return cls(
            content_type=data.get("content_type"),
            content_language=data.get("content_language"),
            content_disposition=data.get("content_disposition"),
            content_encoding=data.get("content_encoding"),
            cache_control=data.get("cache_control"),
            cache_expiry=None if cache_expiry is None else DAVTime(cache_expiry),
        )


@dataclass
class DAVObject:
    """one object's metadata in bucket"""

    key: str
    size: int
    etag: str
    uploaded: DAVTime

    http_metadata: DAVHttpMetadata = field(default_factory=DAVHttpMetadata)
    custom_metadata: dict[str, str] = field(default_factory=dict)


@dataclass
class DAVObjectBody:
    object: DAVObject
    body: DAVResponseBodyGenerator


@dataclass
class DAVObjectListing:
    objects: list[DAVObject] = field(default_factory=list)
    truncated: bool = False
    cursor: str | None = None


class DAVStorage:
    """Flat key-value object bucket.

    Every public method is one round trip to the backend, except list_all().
    Backend errors are not translated, they propagate to the caller.
    """

    type: str

    def __init__(self, uri: str, list_page_size: int = DEFAULT_STORAGE_LIST_PAGE_SIZE):
        self.uri = uri
        self.list_page_size = list_page_size

    def __repr__(self) -> str:
        return self.uri

    async def get(self, key: str) -> DAVObjectBody | None:
        return await self._get(key)

    async def _get(self, key: str) -> DAVObjectBody | None:
        raise NotImplementedError  # pragma: no cover

    async def head(self, key: str) -> DAVObject | None:
        return await self._head(key)

    async def _head(self, key: str) -> DAVObject | None:
        raise NotImplementedError  # pragma: no cover

    async def put(
        self,
        key: str,
        content: bytes,
        http_metadata: DAVHttpMetadata | None = None,
        custom_metadata: dict[str, str] | None = None,
    ) -> DAVObject:
        if http_metadata is None:
            http_metadata = DAVHttpMetadata()
        if custom_metadata is None:
            custom_metadata = dict()

        return await self._put(key, content, http_metadata, custom_metadata)

    async def _put(
        self,
        key: str,
        content: bytes,
        http_metadata: DAVHttpMetadata,
        custom_metadata: dict[str, str],
    ) -> DAVObject:
        raise NotImplementedError  # pragma: no cover

    async def delete(self, key: str) -> None:
        """delete a key which does not exist is not an error"""
        await self._delete(key)

    async def _delete(self, key: str) -> None:
        raise NotImplementedError  # pragma: no cover

    async def list(self, prefix: str, cursor: str | None = None) -> DAVObjectListing:
        """one page, objects are sorted by key, with http and custom metadata

        cursor: the last key of previous page
        """
        return await self._list(prefix, cursor)

    async def _list(self, prefix: str, cursor: str | None) -> DAVObjectListing:
        raise NotImplementedError  # pragma: no cover

    async def list_all(self, prefix: str) -> list[DAVObject]:
        """walk through every page until the listing is no longer truncated"""
        objects = list()
        cursor = None
        while True:
            listing = await self.list(prefix, cursor)
            objects.extend(listing.objects)
            if not listing.truncated:
                break

            cursor = listing.cursor

        logger.debug(f"list_all({prefix!r}): {len(objects)} object(s)")
        return objects
