import json
import sys
from dataclasses import dataclass, field
from logging import getLogger
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from dataclass_wizard import EnvWizard, JSONWizard

from asgi_bucket_dav.constants import (
    CORS_ALLOW_HEADERS,
    CORS_EXPOSE_HEADERS,
    DAV_METHODS,
    DEFAULT_CORS_PREFLIGHT_MAX_AGE,
    DEFAULT_PASSWORD,
    DEFAULT_STORAGE_LIST_PAGE_SIZE,
    DEFAULT_STORAGE_URI,
    DEFAULT_USERNAME,
    AppEntryParameters,
    LoggingLevel,
)
from asgi_bucket_dav.exception import DAVExceptionConfigPaserFailed

logger = getLogger(__name__)


class EnvConfig(EnvWizard):
    class _(EnvWizard.Meta):
        env_prefix = "WEBDAV_"

    username: str | None = None
    password: str | None = None
    storage_uri: str | None = None

    logging_level: str | None = None
    sentry_dsn: str | None = None


@dataclass
class Storage:
    """
    Memory:
        uri: memory:///
    File System:
        uri: file:///data/bucket
    """

    uri: str = DEFAULT_STORAGE_URI
    list_page_size: int = DEFAULT_STORAGE_LIST_PAGE_SIZE


@dataclass
class CORS:
    enable: bool = True
    allow_methods: list[str] = field(default_factory=lambda: list(DAV_METHODS))
    allow_headers: list[str] = field(default_factory=lambda: list(CORS_ALLOW_HEADERS))
    allow_credentials: bool = False
    expose_headers: list[str] = field(
        default_factory=lambda: list(CORS_EXPOSE_HEADERS)
    )
    preflight_max_age: int = DEFAULT_CORS_PREFLIGHT_MAX_AGE


@dataclass
class Logging:
    enable: bool = True
    level: LoggingLevel = LoggingLevel.INFO
    display_datetime: bool = True
    use_colors: bool = True


@dataclass
class Config(JSONWizard):
    # auth
    username: str | None = None
    password: str | None = None

    # storage
    storage: Storage = field(default_factory=Storage)

    # response
    cors: CORS = field(default_factory=CORS)

    # other
    logging: Logging = field(default_factory=Logging)
    sentry_dsn: str | None = None

    def _update_from_env_config(self):
        env_config = EnvConfig()

        # auth
        if env_config.username is not None and env_config.password is not None:
            self.username = env_config.username
            self.password = env_config.password
            logger.info(f"Set user from ENV: {self.username}")

        # storage
        if env_config.storage_uri is not None:
            self.storage.uri = env_config.storage_uri
            logger.info(f"Set storage URI from ENV to {self.storage.uri}")

        # other
        if env_config.logging_level is not None:
            try:
                self.logging.level = LoggingLevel(env_config.logging_level)
                logger.info(f"Set logging level from ENV to {self.logging.level}")
            except ValueError:
                logger.error(f"Invalid logging level: {env_config.logging_level}")

        if env_config.sentry_dsn is not None:
            self.sentry_dsn = env_config.sentry_dsn
            logger.info(f"Set Sentry DSN from ENV to {self.sentry_dsn}")

    def _update_from_app_args(self, aep: AppEntryParameters):
        if aep.admin_user is not None:
            self.username, self.password = aep.admin_user
            logger.info(f"Set user from CLI: {self.username}")

        if aep.storage_uri is not None:
            self.storage.uri = aep.storage_uri
            logger.info(f"Set storage URI from CLI to {self.storage.uri}")

    def _fix_config(self):
        if self.username is None or self.password is None:
            self.username = DEFAULT_USERNAME
            self.password = DEFAULT_PASSWORD
            logger.warning(f"Set default user: {DEFAULT_USERNAME}/{DEFAULT_PASSWORD}")

        if self.storage.list_page_size < 1:
            logger.warning(
                f"Invalid storage list page size: {self.storage.list_page_size}"
            )
            self.storage.list_page_size = DEFAULT_STORAGE_LIST_PAGE_SIZE

    def update_from_app_args_and_env_and_default_value(self, aep: AppEntryParameters):
        """
        CLI Args > Environment Variable > Configuration File > Default Value
        """
        self._update_from_env_config()
        self._update_from_app_args(aep)
        self._fix_config()


_config: Config = Config()


def get_config() -> Config:
    return _config


def reinit_config_from_dict(data: dict) -> Config:
    global _config

    logger.debug("Load config value from python object(dict)")
    _config = Config.from_dict(data)

    return _config


def reinit_config_from_file(file_name: str) -> Config:
    file = Path(file_name)
    match file.suffix:
        case ".json":
            load_func = json.load
        case ".toml":
            load_func = tomllib.load
        case _:
            message = f"Unsupported config file type: {file.suffix}"
            logger.error(message)
            raise DAVExceptionConfigPaserFailed(message)

    try:
        with open(file, "rb") as f:
            data = load_func(f)

    except FileNotFoundError as e:
        message = f"Can not open config file[{file}]!"
        logger.error(message)
        raise DAVExceptionConfigPaserFailed(message) from e

    except (json.JSONDecodeError, tomllib.TOMLDecodeError) as e:
        message = f"Load config from file[{file}] failed!"
        logger.error(message)
        raise DAVExceptionConfigPaserFailed(message) from e

    return reinit_config_from_dict(data)
