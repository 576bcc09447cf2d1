"""
Cache snapshot persistence.

The snapshot is a JSON object mapping each domain to its software identity:

    {"mastodon.social": {"name": "mastodon", "version": "4.2.0"}}

Observation times are not persisted. Entries loaded from a snapshot are adopted
lazily by the cache, see social.graze.fedinfo.resolve.cache.
"""

import logging
from typing import Dict, Mapping

from pydantic import TypeAdapter

from social.graze.fedinfo.model.software import SoftwareIdentity

logger = logging.getLogger(__name__)

SnapshotAdapter = TypeAdapter(Dict[str, SoftwareIdentity])


def load_snapshot(path: str) -> Dict[str, SoftwareIdentity]:
    """
    Read a cache snapshot.

    Raises:
        OSError: If the file cannot be read
        pydantic.ValidationError: If the file is not a valid snapshot
    """
    with open(path, "rb") as fd:
        return SnapshotAdapter.validate_json(fd.read())


def save_snapshot(path: str, entries: Mapping[str, SoftwareIdentity]) -> None:
    """
    Write a cache snapshot, replacing any existing file.

    Raises:
        OSError: If the file cannot be written
    """
    data = SnapshotAdapter.dump_json(dict(entries))
    with open(path, "wb") as fd:
        fd.write(data)
    logger.debug("wrote %d entries to %s", len(entries), path)
