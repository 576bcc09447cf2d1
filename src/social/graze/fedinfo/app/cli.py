"""
Entry point for the fedinfo web service.

Logging is configured from the dictConfig JSON file named by LOGGING_CONFIG_FILE
when it is set. Otherwise the root logger is set up with basicConfig at INFO, or
at DEBUG when the service runs with DEBUG enabled.
"""

import os
from aiohttp import web
import logging
from logging.config import dictConfig
import json


def configure_logging(debug: bool = False):
    logging_config_file = os.getenv("LOGGING_CONFIG_FILE", "")

    if len(logging_config_file) > 0:
        with open(logging_config_file) as fl:
            dictConfig(json.load(fl))
        return

    logging.basicConfig()
    logging.getLogger().setLevel(logging.DEBUG if debug else logging.INFO)


def invoke():
    from social.graze.fedinfo.app.config import Settings
    from social.graze.fedinfo.app.server import start_web_server

    settings = Settings()  # type: ignore
    configure_logging(settings.debug)
    logging.getLogger(__name__).info("listening on %s", settings.listen)

    # run_app handles SIGINT and SIGTERM: it stops accepting connections, waits
    # for in-flight requests, then runs the cleanup context that saves the cache.
    web.run_app(
        start_web_server(settings),
        host=settings.http_host,
        port=settings.http_port,
        shutdown_timeout=settings.shutdown_timeout,
    )


if __name__ == "__main__":
    invoke()
