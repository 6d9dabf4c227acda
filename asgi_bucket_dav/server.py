import logging.config
import sys
from logging import getLogger

from asgiref.typing import ASGIReceiveCallable, ASGISendCallable, Scope

from asgi_bucket_dav import __name__ as app_name
from asgi_bucket_dav import __version__
from asgi_bucket_dav.auth import DAVAuth
from asgi_bucket_dav.config import (
    Config,
    get_config,
    reinit_config_from_dict,
    reinit_config_from_file,
)
from asgi_bucket_dav.constants import AppEntryParameters
from asgi_bucket_dav.exception import (
    DAVExceptionNotImplemented,
    DAVExceptionStorageInitFailed,
)
from asgi_bucket_dav.log import get_dav_logging_config
from asgi_bucket_dav.middleware.cors import ASGIMiddlewareCORS
from asgi_bucket_dav.request import DAVRequest
from asgi_bucket_dav.response import DAVResponse, DAVResponseError
from asgi_bucket_dav.storage import create_storage
from asgi_bucket_dav.web_dav import WebDAV

logger = getLogger(__name__)


_service_abnormal_exit_message = "ASGI Bucket WebDAV Server has stopped working!"


class Server:
    def __init__(self, config: Config):
        logger.info(f"ASGI Bucket WebDAV Server(v{__version__}) starting...")
        self.dav_auth = DAVAuth(config)
        try:
            storage = create_storage(config)

        except DAVExceptionStorageInitFailed as e:
            logger.critical(e)
            logger.info(_service_abnormal_exit_message)
            sys.exit(1)

        self.web_dav = WebDAV(storage)

    async def __call__(
        self, scope: Scope, receive: ASGIReceiveCallable, send: ASGISendCallable
    ) -> None:
        if scope["type"] != "http":  # pragma: no cover
            logger.warning(f"Unsupported ASGI scope type: {scope['type']}")
            return

        request = DAVRequest(scope, receive, send)
        try:
            response = await self.handle(request)

        except DAVExceptionNotImplemented as e:
            logger.warning(e)
            response = DAVResponseError(501, "Not Implemented")

        except Exception as e:
            logger.exception(e)
            response = DAVResponseError(500, "Internal Server Error")

        logger.info(
            '%s - "%s %s" %d - %s',
            request.client_ip_address,
            request.raw_method,
            request.path,
            response.status,
            request.client_user_agent,
        )
        await response.send_in_one_call(request)

    async def handle(self, request: DAVRequest) -> DAVResponse:
        # check user auth, before any storage access
        if not self.dav_auth.is_authorized(request):
            logger.debug(request)
            return self.dav_auth.create_response_401()

        # process WebDAV request
        response = await self.web_dav.distribute(request)

        logger.debug(response)
        return response


def get_asgi_app(aep: AppEntryParameters, config_obj: dict | None = None):
    """create ASGI app"""
    logging.config.dictConfig(get_dav_logging_config())

    # init config
    if aep.config_file is not None:
        reinit_config_from_file(aep.config_file)
    if config_obj is not None:
        reinit_config_from_dict(config_obj)

    config = get_config()
    config.update_from_app_args_and_env_and_default_value(aep=aep)

    if config.logging.enable:
        logging.config.dictConfig(
            get_dav_logging_config(
                level=config.logging.level.value,
                display_datetime=aep.logging_display_datetime
                and config.logging.display_datetime,
                use_colors=aep.logging_use_colors and config.logging.use_colors,
            )
        )

    # create ASGI app
    app = Server(config)

    # CORS
    if config.cors.enable:
        app = ASGIMiddlewareCORS(
            app=app,
            allow_methods=config.cors.allow_methods,
            allow_headers=config.cors.allow_headers,
            allow_credentials=config.cors.allow_credentials,
            expose_headers=config.cors.expose_headers,
            preflight_max_age=config.cors.preflight_max_age,
        )

    # config sentry
    if config.sentry_dsn:
        try:
            import sentry_sdk
            from sentry_sdk.integrations.asgi import SentryAsgiMiddleware

            sentry_sdk.init(
                dsn=config.sentry_dsn,
                release=f"{app_name}@{__version__}",
            )
            app = SentryAsgiMiddleware(app)

        except ImportError as e:
            logger.warning(e)

    logger.info(
        "ASGI Bucket WebDAV Server running on http://{}:{} "
        "(Press CTRL+C to quit)".format(
            aep.bind_host if aep.bind_host is not None else "?",
            aep.bind_port if aep.bind_port is not None else "?",
        )
    )
    return app


def convert_aep_to_uvicorn_kwargs(aep: AppEntryParameters) -> dict:
    return {
        "app": get_asgi_app(aep=aep),
        "host": aep.bind_host,
        "port": aep.bind_port,
        "use_colors": aep.logging_use_colors,
        "lifespan": "off",
        "log_level": "warning",
        "access_log": False,
        "forwarded_allow_ips": "*",
    }
