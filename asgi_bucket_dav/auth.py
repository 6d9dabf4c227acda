from base64 import b64encode
from logging import getLogger

from asgi_bucket_dav.config import Config
from asgi_bucket_dav.constants import DEFAULT_AUTH_REALM
from asgi_bucket_dav.request import DAVRequest
from asgi_bucket_dav.response import DAVResponse

logger = getLogger(__name__)

"""
Ref:
- https://en.wikipedia.org/wiki/Basic_access_authentication
- https://datatracker.ietf.org/doc/html/rfc7617
    - The 'Basic' HTTP Authentication Scheme
"""

MESSAGE_401_TEMPLATE = """<!DOCTYPE html>
<html>
  <head>
    <meta charset="UTF-8" />
    <title>Error</title>
  </head>
  <body>
    <h1>401 Unauthorized. {}</h1>
  </body>
</html>"""


class DAVAuth:
    realm = DEFAULT_AUTH_REALM

    def __init__(self, config: Config):
        self.config = config

        # only one account, compare with the whole header value
        self.basic_credential = b"Basic " + b64encode(
            f"{config.username}:{config.password}".encode("utf-8")
        )

    def is_authorized(self, request: DAVRequest) -> bool:
        if request.authorization is None:
            logger.debug(f"Missing Authorization header, {request.client_ip_address}")
            return False

        if request.authorization != self.basic_credential:
            logger.debug(f"Bad credentials, {request.client_ip_address}")
            return False

        return True

    def make_auth_challenge_string(self) -> bytes:
        return f'Basic realm="{self.realm}"'.encode("utf-8")

    def create_response_401(self, message: str = "") -> DAVResponse:
        return DAVResponse(
            status=401,
            content=MESSAGE_401_TEMPLATE.format(message).encode("utf-8"),
            headers={b"WWW-Authenticate": self.make_auth_challenge_string()},
        )
