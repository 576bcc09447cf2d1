"""
fedinfo Application Layer

This package implements the web application layer for the fedinfo service, handling HTTP
requests and responses using the aiohttp framework.

Key Components:
- __main__.py: Entry point for running the application
- cli.py: Logging setup and process entry point
- server.py: Web server configuration, middleware and startup/shutdown lifecycle
- config.py: Configuration management using Pydantic settings
- snapshot.py: Reading and writing the cache snapshot
- metrics.py: Metrics backends
- handlers/: Request handlers for the public and internal endpoints

The application uses two middleware layers:
- Statsd middleware for metrics collection
- Sentry middleware for error reporting

It provides the following endpoints:
- GET /node-info?domain=example.social: software name and version of a domain
- GET /internal/alive: liveness probe
- GET /internal/api/cache: number of cached domains

The cache is seeded from the snapshot file when the application starts and written back
when it shuts down.
"""
