from asyncio import Lock
from copy import deepcopy
from dataclasses import dataclass

from asgi_bucket_dav.constants import DAVTime
from asgi_bucket_dav.helpers import generate_etag, get_data_generator_from_content
from asgi_bucket_dav.storage.base import (
    DAVHttpMetadata,
    DAVObject,
    DAVObjectBody,
    DAVObjectListing,
    DAVStorage,
)


@dataclass
class MemoryObject:
    object: DAVObject
    content: bytes


class MemoryStorage(DAVStorage):
    type = "memory"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self._data: dict[str, MemoryObject] = dict()
        self._lock = Lock()

    def __repr__(self):
        return "memory:///"

    async def _get(self, key: str) -> DAVObjectBody | None:
        async with self._lock:
            member = self._data.get(key)
            if member is None:
                return None

            return DAVObjectBody(
                object=deepcopy(member.object),
                body=get_data_generator_from_content(member.content),
            )

    async def _head(self, key: str) -> DAVObject | None:
        async with self._lock:
            member = self._data.get(key)
            if member is None:
                return None

            return deepcopy(member.object)

    async def _put(
        self,
        key: str,
        content: bytes,
        http_metadata: DAVHttpMetadata,
        custom_metadata: dict[str, str],
    ) -> DAVObject:
        dav_object = DAVObject(
            key=key,
            size=len(content),
            etag=generate_etag(content),
            uploaded=DAVTime(),
            http_metadata=deepcopy(http_metadata),
            custom_metadata=dict(custom_metadata),
        )
        async with self._lock:
            self._data[key] = MemoryObject(object=dav_object, content=content)

        return deepcopy(dav_object)

    async def _delete(self, key: str) -> None:
        async with self._lock:
            self._data.pop(key, None)

    async def _list(self, prefix: str, cursor: str | None) -> DAVObjectListing:
        async with self._lock:
            keys = sorted(
                key
                for key in self._data.keys()
                if key.startswith(prefix) and (cursor is None or key > cursor)
            )

            page = keys[: self.list_page_size]
            return DAVObjectListing(
                objects=[deepcopy(self._data[key].object) for key in page],
                truncated=len(keys) > len(page),
                cursor=page[-1] if len(page) > 0 else None,
            )
