"""
Data Models

This package defines the pydantic models shared by the resolver and the web
application.

Key Components:
- software.py: NodeInfo discovery and versioned documents, the SoftwareIdentity
  extracted from them, and the NodeInfo resolution result

SoftwareIdentity is frozen so that values handed out by the cache can be shared
between concurrent requests without copying.
"""
