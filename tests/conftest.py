import pytest

from .testkit_asgi import PASSWORD, USERNAME, ASGITestClient, get_webdav_app


@pytest.fixture
def client() -> ASGITestClient:
    """authorized client, fresh memory:/// bucket"""
    return ASGITestClient(get_webdav_app(), username=USERNAME, password=PASSWORD)
