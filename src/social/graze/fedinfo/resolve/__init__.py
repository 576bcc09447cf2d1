"""
Software Resolution

This package resolves fediverse domains to the software they run, using the
NodeInfo discovery protocol, and memoizes the results.

Key Components:
- nodeinfo.py: Domain normalization and two-hop NodeInfo discovery
- cache.py: TTL cache of resolved software identities
- __main__.py: CLI interface for resolution

The resolution flow follows these steps:
1. Normalize the input to a bare domain, accepting input with or without a scheme
2. Return the cached identity if one is fresh
3. Fetch https://{domain}/.well-known/nodeinfo and pick the NodeInfo 2.1 link,
   falling back to NodeInfo 2.0
4. Fetch the linked document, extract its software name and version, and cache it

A domain that links neither schema resolves to an empty identity and is not cached.
"""
