import logging
import traceback
from aiohttp import web
import sentry_sdk

from social.graze.fedinfo.app.config import (
    MetricsClientAppKey,
    SessionAppKey,
    SettingsAppKey,
    SoftwareCacheAppKey,
)
from social.graze.fedinfo.errors import FetchError, UserCorrectableException
from social.graze.fedinfo.resolve.nodeinfo import resolve_domain

logger = logging.getLogger(__name__)


async def handle_node_info(request: web.Request):
    """
    Report the software a domain runs.

    Query parameters:
        domain: The domain to resolve, with or without a scheme

    Responds with the NodeInfo JSON on success, a plain text 400 for input the
    caller can correct, and a generic 500 for everything else.
    """
    logger.info("request received: %s", request.path)
    metrics_client = request.app[MetricsClientAppKey]
    prefix = request.app[SettingsAppKey].statsd_prefix

    try:
        node_info = await resolve_domain(
            request.app[SessionAppKey],
            request.app[SoftwareCacheAppKey],
            request.query.get("domain", ""),
        )
    except UserCorrectableException as e:
        metrics_client.increment(
            f"{prefix}.resolve.error", 1, tag_dict={"error": type(e).__name__}
        )
        return web.Response(status=400, text=str(e))
    except Exception as e:
        metrics_client.increment(
            f"{prefix}.resolve.error", 1, tag_dict={"error": type(e).__name__}
        )
        logger.error(
            f"unhandled error in handle_node_info: {type(e).__name__}: {str(e)}\n"
            f"Traceback:\n{traceback.format_exc()}"
        )
        # Fetch failures are reported where they happen.
        if not isinstance(e, FetchError):
            sentry_sdk.capture_exception(e)
        raise web.HTTPInternalServerError(text="Internal Server Error")

    return web.json_response(node_info.model_dump())
