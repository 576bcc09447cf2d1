"""NodeInfo wire documents and the software identity extracted from them."""

from typing import Final, List

from pydantic import BaseModel, ConfigDict, field_validator

NODEINFO_SCHEMA_20: Final = "http://nodeinfo.diaspora.software/ns/schema/2.0"
NODEINFO_SCHEMA_21: Final = "http://nodeinfo.diaspora.software/ns/schema/2.1"

WELL_KNOWN_NODEINFO_PATH: Final = "/.well-known/nodeinfo"


def null_to_empty(v):
    """Read a JSON null in a string field as the empty string."""
    if v is None:
        return ""
    return v


class SoftwareIdentity(BaseModel):
    """
    The name and version a remote instance reports about itself.

    Instances are immutable. ``SoftwareIdentity()`` is the empty identity returned
    for cache misses and for domains that publish no recognized NodeInfo link.
    """

    model_config = ConfigDict(frozen=True)

    name: str = ""
    version: str = ""

    @field_validator("name", "version", mode="before")
    @classmethod
    def null_fields(cls, v):
        return null_to_empty(v)


class Link(BaseModel):
    rel: str = ""
    href: str = ""

    @field_validator("rel", "href", mode="before")
    @classmethod
    def null_fields(cls, v):
        return null_to_empty(v)


class WellKnownNodeInfo(BaseModel):
    """The discovery document served at ``/.well-known/nodeinfo``."""

    links: List[Link] = []

    @field_validator("links", mode="before")
    @classmethod
    def null_links(cls, v) -> List:
        # Some servers publish "links": null
        if v is None:
            return []
        return v


class VersionedNodeInfo(BaseModel):
    """
    A NodeInfo 2.0 or 2.1 document.

    Only the ``software`` block is of interest, everything else in the document
    (usage, protocols, metadata) is ignored.
    """

    software: SoftwareIdentity = SoftwareIdentity()


class NodeInfo(BaseModel):
    """Resolution result for a single domain."""

    domain: str
    software: SoftwareIdentity = SoftwareIdentity()

