from typing import List
import argparse
import aiohttp
import asyncio
import logging

logger = logging.getLogger(__name__)

from social.graze.fedinfo.resolve.cache import SoftwareCache
from social.graze.fedinfo.resolve.nodeinfo import resolve_domain


async def realMain() -> None:
    parser = argparse.ArgumentParser(
        prog="resolve", description="Resolve the software run by fediverse domains"
    )
    parser.add_argument("domain", nargs="+", help="The domain(s) to resolve.")
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Total timeout in seconds for each outbound request.",
    )

    args = vars(parser.parse_args())

    domains: List[str] = args.get("domain", [])
    cache = SoftwareCache()
    timeout = aiohttp.ClientTimeout(total=args.get("timeout"))

    async with aiohttp.ClientSession(timeout=timeout) as session:
        for domain in domains:
            try:
                node_info = await resolve_domain(session, cache, domain)
                print(node_info.model_dump_json())
            except Exception:
                logger.exception("Exception resolving domain %s", domain)


def main() -> None:
    logging.basicConfig()
    asyncio.run(realMain())


if __name__ == "__main__":
    main()
