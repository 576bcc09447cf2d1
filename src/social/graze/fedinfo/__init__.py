"""
fedinfo - Fediverse Software Identification

This module implements a small service that reports which federated social
networking software a domain runs, and which version, by following the NodeInfo
discovery protocol.

Key Components:
- app: Web application layer with the request handler, server lifecycle and configuration
- model: Pydantic models for NodeInfo documents and resolution results
- resolve: NodeInfo discovery and the TTL cache of resolved identities
- errors: Failure taxonomy shared by the resolver and the web layer

Architecture Overview:
1. Resolution:
   - Input is normalized to a bare domain
   - A fresh cached identity is returned immediately
   - Otherwise the well-known discovery document and the linked NodeInfo
     document are fetched and the result is cached

2. Cache Lifetime:
   - The cache is seeded from a JSON snapshot at startup
   - Seeded entries are considered fresh from their first use
   - The cache is written back to the snapshot at shutdown
"""
