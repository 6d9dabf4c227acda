from logging import getLogger

import click

try:
    import uvicorn
except ImportError:
    uvicorn = None

from asgi_bucket_dav.constants import AppEntryParameters
from asgi_bucket_dav.server import convert_aep_to_uvicorn_kwargs

logger = getLogger(__name__)


def convert_click_kwargs_to_aep(kwargs: dict) -> AppEntryParameters:
    return AppEntryParameters(
        bind_host=kwargs["host"],
        bind_port=kwargs["port"],
        config_file=kwargs["config"],
        admin_user=kwargs["user"],
        storage_uri=kwargs["storage"],
        logging_display_datetime=kwargs["logging_display_datetime"],
        logging_use_colors=kwargs["logging_use_colors"],
    )


@click.command("runserver", help="Run ASGI Bucket WebDAV server")
@click.option(
    "-V",
    "--version",
    is_flag=True,
    default=False,
    help="Print version info and exit.",
)
@click.option(
    "-H",
    "--host",
    default="127.0.0.1",
    help="Bind socket to this host.  [default: 127.0.0.1]",
)
@click.option(
    "-P", "--port", default=8000, help="Bind socket to this port.  [default: 8000]"
)
@click.option(
    "-c",
    "--config",
    default=None,
    help="Load configuration from file.  [default: None]",
)
@click.option(
    "-u",
    "--user",
    type=(str, str),
    default=None,
    help="Username/password. [default: username password]",
)
@click.option(
    "-s",
    "--storage",
    default=None,
    help="Bucket storage URI, eg: memory:/// or file:///data. [default: memory:///]",
)
@click.option(
    "--logging-display-datetime/--logging-no-display-datetime",
    is_flag=True,
    default=True,
    help="Turn on datetime in logging",
)
@click.option(
    "--logging-use-colors/--logging-no-use-colors",
    is_flag=True,
    default=True,
    help="Turn on color in logging",
)
def main(**kwargs):
    if kwargs["version"]:
        from asgi_bucket_dav import __version__

        print(__version__)
        exit()

    if uvicorn is None:
        print(
            "Please install ASGI web server implementation first.\n"
            "  eg: pip install -U ASGIBucketDAV[uvicorn]"
        )
        exit(1)

    aep = convert_click_kwargs_to_aep(kwargs)
    kwargs = convert_aep_to_uvicorn_kwargs(aep)
    logger.debug(f"uvicorn's kwargs:{kwargs}")

    return uvicorn.run(**kwargs)
