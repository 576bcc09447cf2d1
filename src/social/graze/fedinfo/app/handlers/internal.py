from aiohttp import web

from social.graze.fedinfo.app.config import SoftwareCacheAppKey


async def handle_internal_alive(request: web.Request):
    return web.Response(status=200)


async def handle_internal_cache(request: web.Request):
    """Report how many domains the cache holds, stale entries included."""
    return web.json_response({"entries": len(request.app[SoftwareCacheAppKey])})
