from asgi_bucket_dav.constants import DAVTime
from asgi_bucket_dav.hierarchy import (
    DAVHierarchyEntry,
    get_child_key,
    synthesize_children,
)
from asgi_bucket_dav.storage import DAVObject


def create_objects(*keys: str) -> list[DAVObject]:
    return [DAVObject(key=key, size=0, etag="", uploaded=DAVTime(0)) for key in keys]


def get_keys(entries: list[DAVHierarchyEntry]) -> list[tuple[str, bool]]:
    return [(entry.key, entry.object is None) for entry in entries]


def test_get_child_key():
    assert get_child_key("", "a") == "a"
    assert get_child_key("docs", "a") == "docs/a"


def test_files_and_directory():
    entries = synthesize_children(
        "docs", create_objects("docs/a.txt", "docs/b.txt", "docs/sub/c.txt")
    )
    assert get_keys(entries) == [
        ("docs/a.txt", False),
        ("docs/b.txt", False),
        ("docs/sub", True),
    ]
    assert entries[0].object.key == "docs/a.txt"
    assert entries[2].object is None
    assert entries[2].href == "/docs/sub"


def test_first_appearance_and_dedup():
    entries = synthesize_children(
        "docs",
        create_objects(
            "docs/a/1.txt",
            "docs/a/2.txt",
            "docs/a/deep/3.txt",
            "docs/b.txt",
            "docs/c/1.txt",
        ),
    )
    assert get_keys(entries) == [
        ("docs/a", True),
        ("docs/b.txt", False),
        ("docs/c", True),
    ]


def test_marker():
    # directory marker of itself is skipped, the child's marker is a directory
    entries = synthesize_children(
        "docs", create_objects("docs/", "docs/sub/", "docs/a.txt")
    )
    assert get_keys(entries) == [("docs/sub", True), ("docs/a.txt", False)]

    assert synthesize_children("docs", create_objects("docs/")) == []


def test_root():
    entries = synthesize_children(
        "", create_objects("a.txt", "docs/", "docs/a.txt", "photos/x.jpg")
    )
    assert get_keys(entries) == [
        ("a.txt", False),
        ("docs", True),
        ("photos", True),
    ]
    assert entries[1].href == "/docs"


def test_objects_outside_prefix():
    entries = synthesize_children("docs", create_objects("docsfoo", "other/a.txt"))
    assert entries == []
