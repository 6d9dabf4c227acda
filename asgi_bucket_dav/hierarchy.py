from collections.abc import Iterable
from dataclasses import dataclass

from asgi_bucket_dav.storage.base import DAVObject


@dataclass(slots=True)
class DAVHierarchyEntry:
    """direct child of a directory

    object is None for a synthetic directory
    """

    key: str
    object: DAVObject | None = None

    @property
    def href(self) -> str:
        return "/" + self.key


def get_child_key(key: str, name: str) -> str:
    if len(key) == 0:
        return name

    return f"{key}/{name}"


def synthesize_children(
    key: str, objects: Iterable[DAVObject]
) -> list[DAVHierarchyEntry]:
    """Fold a flat prefix listing into the direct children of directory `key`.

    - "key/a.txt"      => file "key/a.txt"
    - "key/sub/c.txt"  => directory "key/sub", once, where it first appears
    - "key/"           => marker of the directory itself, skipped
    """
    if len(key) == 0:
        prefix = ""
    else:
        prefix = key + "/"

    entries = list()
    seen = {key}
    for dav_object in objects:
        if not dav_object.key.startswith(prefix):
            continue

        suffix = dav_object.key[len(prefix) :]
        if len(suffix) == 0:
            continue

        if "/" not in suffix:
            entries.append(DAVHierarchyEntry(key=dav_object.key, object=dav_object))
            continue

        child_key = get_child_key(key, suffix.split("/", maxsplit=1)[0])
        if child_key in seen:
            continue

        seen.add(child_key)
        entries.append(DAVHierarchyEntry(key=child_key))

    return entries
