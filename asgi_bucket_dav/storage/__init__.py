from logging import getLogger

from asgi_bucket_dav.config import Config
from asgi_bucket_dav.exception import DAVExceptionStorageInitFailed
from asgi_bucket_dav.storage.base import (  # noqa: F401
    DAVHttpMetadata,
    DAVObject,
    DAVObjectBody,
    DAVObjectListing,
    DAVStorage,
)
from asgi_bucket_dav.storage.file_system import FileSystemStorage
from asgi_bucket_dav.storage.memory import MemoryStorage

logger = getLogger(__name__)


def create_storage(config: Config) -> DAVStorage:
    uri = config.storage.uri
    if uri.startswith("file://"):
        storage_factory = FileSystemStorage

    elif uri.startswith("memory://"):
        storage_factory = MemoryStorage

    else:
        raise DAVExceptionStorageInitFailed(f"Unsupported storage URI: {uri}")

    storage = storage_factory(uri=uri, list_page_size=config.storage.list_page_size)
    logger.info(f"Storage: {storage}")
    return storage
