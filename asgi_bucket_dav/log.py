import logging
import sys
from copy import copy

import click


class DefaultFormatter(logging.Formatter):
    logging_level_color = {
        logging.DEBUG: "cyan",
        logging.INFO: "green",
        logging.WARNING: "yellow",
        logging.ERROR: "red",
        logging.CRITICAL: "bright_red",
    }

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        style: str = "%",
        use_colors: bool | None = None,
    ):
        if use_colors in (True, False):
            self.use_colors = use_colors and sys.stdout.isatty()
        else:
            self.use_colors = False

        super().__init__(fmt=fmt, datefmt=datefmt, style=style)

    @staticmethod
    def status_code_color(status: int) -> str:
        if status < 200:
            return "bright_red"
        elif status < 400:
            return "cyan"
        elif status < 500:
            return "yellow"

        return "red"

    def format(self, record: logging.LogRecord) -> str:
        record_copy = copy(record)
        if self.use_colors:
            record_copy.levelname = click.style(
                record.levelname,
                fg=self.logging_level_color.get(record.levelno, "bright_red"),
            )

            # access log: client, method, path, status, user agent
            if (
                isinstance(record.args, tuple)
                and len(record.args) == 5
                and isinstance(record.args[3], int)
            ):
                status = record.args[3]
                record_copy.args = (
                    record.args[0],
                    record.args[1],
                    record.args[2],
                    click.style(str(status), fg=self.status_code_color(status)),
                    record.args[4],
                )
                record_copy.msg = record.msg.replace("%d", "%s")

        return super().format(record_copy)


def get_dav_logging_config(
    level: str = "INFO", display_datetime: bool = True, use_colors: bool = True
) -> dict:
    if display_datetime:
        default_format = "%(asctime)s %(levelname)s: [%(name)s] %(message)s"
    else:
        default_format = "%(levelname)s: [%(name)s] %(message)s"

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "()": "asgi_bucket_dav.log.DefaultFormatter",
                "fmt": default_format,
                "use_colors": use_colors,
            },
        },
        "handlers": {
            "default": {
                "level": level,
                "formatter": "default",
                "class": "logging.StreamHandler",
            },
        },
        "loggers": {
            "asgi_bucket_dav": {
                "handlers": ["default"],
                "propagate": False,
                "level": level,
            },
            "uvicorn": {"handlers": ["default"], "level": level},
            "uvicorn.error": {"level": level},
        },
    }
    return logging_config
