import logging
from time import time
from typing import (
    Optional,
)
from aiohttp import web
import aiohttp
from pydantic import ValidationError
import sentry_sdk
from sentry_sdk.integrations.aiohttp import AioHttpIntegration

from social.graze.fedinfo.app.config import (
    MetricsClientAppKey,
    SessionAppKey,
    Settings,
    SettingsAppKey,
    SoftwareCacheAppKey,
)
from social.graze.fedinfo.app.handlers.internal import (
    handle_internal_alive,
    handle_internal_cache,
)
from social.graze.fedinfo.app.handlers.nodeinfo import handle_node_info
from social.graze.fedinfo.app.metrics import create_metrics_client
from social.graze.fedinfo.app.snapshot import load_snapshot, save_snapshot
from social.graze.fedinfo.resolve.cache import SoftwareCache

logger = logging.getLogger(__name__)


def populate_cache(cache: SoftwareCache, cache_file: str) -> None:
    """Seed the cache from the snapshot file. A missing or broken snapshot is not fatal."""
    logger.info("populating cache from %s", cache_file)
    try:
        entries = load_snapshot(cache_file)
    except OSError as e:
        logger.warning("failed to open cache file: %s", e)
        return
    except ValidationError as e:
        logger.warning("failed to populate cache: %s", e)
        return
    cache.load(entries)
    logger.info("loaded %d cache entries", len(entries))


def persist_cache(cache: SoftwareCache, cache_file: str) -> None:
    try:
        save_snapshot(cache_file, cache.dump())
    except OSError as e:
        logger.error("failed to write out cache: %s", e)


async def background_tasks(app):
    logger.info("Starting up")
    settings: Settings = app[SettingsAppKey]

    trace_config = aiohttp.TraceConfig()

    if settings.debug:

        async def on_request_start(
            session, trace_config_ctx, params: aiohttp.TraceRequestStartParams
        ):
            logging.info("Starting request: %s", params)

        async def on_request_end(session, trace_config_ctx, params):
            logging.info("Ending request: %s", params)

        trace_config.on_request_start.append(on_request_start)
        trace_config.on_request_end.append(on_request_end)

    app[SessionAppKey] = aiohttp.ClientSession(
        timeout=aiohttp.ClientTimeout(total=settings.fetch_timeout),
        trace_configs=[trace_config],
    )

    metrics_client = create_metrics_client(
        settings.metrics_backend,
        host=settings.statsd_host,
        port=settings.statsd_port,
        debug=settings.debug,
    )
    await metrics_client.connect()
    app[MetricsClientAppKey] = metrics_client

    populate_cache(app[SoftwareCacheAppKey], settings.cache_file)

    logger.info("Startup complete")

    yield

    logger.info("Shutting down")

    persist_cache(app[SoftwareCacheAppKey], settings.cache_file)

    await app[SessionAppKey].close()
    await app[MetricsClientAppKey].close()


@web.middleware
async def sentry_middleware(request: web.Request, handler):
    try:
        response = await handler(request)
        return response
    except web.HTTPException:
        raise
    except Exception as e:
        sentry_sdk.capture_exception(e)
        raise e


@web.middleware
async def statsd_middleware(request: web.Request, handler):
    metrics_client = request.app[MetricsClientAppKey]
    prefix = request.app[SettingsAppKey].statsd_prefix
    request_method: str = request.method
    request_path = request.path

    start_time: float = time()
    response_status_code = 0

    try:
        response = await handler(request)
        response_status_code = response.status
        return response
    except web.HTTPException as e:
        response_status_code = e.status
        raise e
    except Exception as e:
        metrics_client.increment(
            f"{prefix}.server.request.exception",
            1,
            tag_dict={
                "exception": type(e).__name__,
                "path": request_path,
                "method": request_method,
            },
        )
        raise e
    finally:
        metrics_client.timer(
            f"{prefix}.server.request.time",
            time() - start_time,
            tag_dict={"path": request_path, "method": request_method},
        )
        metrics_client.increment(
            f"{prefix}.server.request.count",
            1,
            tag_dict={
                "path": request_path,
                "method": request_method,
                "status": response_status_code,
            },
        )


async def start_web_server(
    settings: Optional[Settings] = None, cache: Optional[SoftwareCache] = None
):

    if settings is None:
        settings = Settings()  # type: ignore
    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            send_default_pii=True,
            integrations=[AioHttpIntegration()]
        )
    app = web.Application(middlewares=[statsd_middleware, sentry_middleware])

    app[SettingsAppKey] = settings
    app[SoftwareCacheAppKey] = (
        cache if cache is not None else SoftwareCache(ttl=settings.cache_ttl)
    )

    app.add_routes([web.get("/node-info", handle_node_info)])

    app.add_routes(
        [
            web.get("/internal/alive", handle_internal_alive),
            web.get("/internal/api/cache", handle_internal_cache),
        ]
    )

    app.cleanup_ctx.append(background_tasks)

    return app
