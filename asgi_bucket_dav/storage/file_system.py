import json
import urllib.parse
from collections.abc import AsyncGenerator
from logging import getLogger
from pathlib import Path

import aiofiles
import aiofiles.os
import aiofiles.ospath

from asgi_bucket_dav.constants import RESPONSE_DATA_BLOCK_SIZE, DAVTime
from asgi_bucket_dav.exception import (
    DAVExceptionStorageFailed,
    DAVExceptionStorageInitFailed,
)
from asgi_bucket_dav.helpers import generate_etag
from asgi_bucket_dav.storage.base import (
    DAVHttpMetadata,
    DAVObject,
    DAVObjectBody,
    DAVObjectListing,
    DAVStorage,
)

logger = getLogger(__name__)

OBJECT_DIR_NAME = "objects"
METADATA_DIR_NAME = "metadata"
METADATA_FILE_SUFFIX = ".json"
"""metadata file format: JSON
{
    "key": "a/b.txt",
    "size": 3,
    "etag": "900150983cd24fb0d6963f7d28e17f72",
    "uploaded": 1700000000.0,
    "http_metadata": {"content_type": "text/plain"},
    "custom_metadata": {}
}
"""


def _encode_key(key: str) -> str:
    # flat namespace, "a" and "a/" are different objects; "." and ".." are not names
    return urllib.parse.quote(key, safe="").replace(".", "%2E")


def _decode_key(name: str) -> str:
    return urllib.parse.unquote(name)


def _dump_object(dav_object: DAVObject) -> str:
    return json.dumps(
        {
            "key": dav_object.key,
            "size": dav_object.size,
            "etag": dav_object.etag,
            "uploaded": dav_object.uploaded.timestamp,
            "http_metadata": dav_object.http_metadata.as_dict(),
            "custom_metadata": dav_object.custom_metadata,
        }
    )


def _load_object(data: str) -> DAVObject:
    try:
        data = json.loads(data)
        return DAVObject(
            key=data["key"],
            size=data["size"],
            etag=data["etag"],
            uploaded=DAVTime(data["uploaded"]),
            http_metadata=DAVHttpMetadata.from_dict(data.get("http_metadata", {})),
            custom_metadata=data.get("custom_metadata", {}),
        )

    except (json.JSONDecodeError, KeyError, TypeError) as e:
        raise DAVExceptionStorageFailed(f"Broken metadata: {e}") from e


async def _object_data_generator(
    file: Path, block_size: int = RESPONSE_DATA_BLOCK_SIZE
) -> AsyncGenerator[tuple[bytes, bool], None]:
    async with aiofiles.open(file, mode="rb") as f:
        more_body = True
        while more_body:
            data = await f.read(block_size)
            more_body = len(data) == block_size

            yield data, more_body


class FileSystemStorage(DAVStorage):
    type = "file"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.root_path = Path(self.uri[7:])
        if not self.root_path.exists():
            raise DAVExceptionStorageInitFailed(
                'Init FileSystemStorage failed, "{}" is not exists.'.format(
                    self.root_path
                )
            )

        self.object_path = self.root_path.joinpath(OBJECT_DIR_NAME)
        self.metadata_path = self.root_path.joinpath(METADATA_DIR_NAME)
        self.object_path.mkdir(exist_ok=True)
        self.metadata_path.mkdir(exist_ok=True)

    def __repr__(self):
        return f"file://{self.root_path}"

    def _get_object_file(self, key: str) -> Path:
        return self.object_path.joinpath(_encode_key(key))

    def _get_metadata_file(self, key: str) -> Path:
        return self.metadata_path.joinpath(_encode_key(key) + METADATA_FILE_SUFFIX)

    async def _read_metadata(self, key: str) -> DAVObject | None:
        if len(key) == 0:
            return None

        file = self._get_metadata_file(key)
        if not await aiofiles.ospath.exists(file):
            return None

        async with aiofiles.open(file, mode="r", encoding="utf-8") as f:
            return _load_object(await f.read())

    async def _get(self, key: str) -> DAVObjectBody | None:
        dav_object = await self._read_metadata(key)
        if dav_object is None:
            return None

        return DAVObjectBody(
            object=dav_object,
            body=_object_data_generator(self._get_object_file(key)),
        )

    async def _head(self, key: str) -> DAVObject | None:
        return await self._read_metadata(key)

    async def _put(
        self,
        key: str,
        content: bytes,
        http_metadata: DAVHttpMetadata,
        custom_metadata: dict[str, str],
    ) -> DAVObject:
        if len(key) == 0:
            raise DAVExceptionStorageFailed("Object key can not be empty")

        dav_object = DAVObject(
            key=key,
            size=len(content),
            etag=generate_etag(content),
            uploaded=DAVTime(),
            http_metadata=http_metadata,
            custom_metadata=custom_metadata,
        )

        async with aiofiles.open(self._get_object_file(key), mode="wb") as f:
            await f.write(content)
        async with aiofiles.open(
            self._get_metadata_file(key), mode="w", encoding="utf-8"
        ) as f:
            await f.write(_dump_object(dav_object))

        return dav_object

    async def _delete(self, key: str) -> None:
        if len(key) == 0:
            return

        # metadata first, the object is invisible without it
        for file in (self._get_metadata_file(key), self._get_object_file(key)):
            try:
                await aiofiles.os.remove(file)
            except FileNotFoundError:
                logger.debug(f"Delete {file}, but it does not exist")

    async def _list(self, prefix: str, cursor: str | None) -> DAVObjectListing:
        keys = list()
        for name in await aiofiles.os.listdir(self.metadata_path):
            if not name.endswith(METADATA_FILE_SUFFIX):
                continue

            key = _decode_key(name[: -len(METADATA_FILE_SUFFIX)])
            if key.startswith(prefix) and (cursor is None or key > cursor):
                keys.append(key)

        keys.sort()
        page = keys[: self.list_page_size]

        objects = list()
        for key in page:
            dav_object = await self._read_metadata(key)
            if dav_object is not None:
                objects.append(dav_object)

        return DAVObjectListing(
            objects=objects,
            truncated=len(keys) > len(page),
            cursor=page[-1] if len(page) > 0 else None,
        )
