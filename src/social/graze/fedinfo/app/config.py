"""
Configuration Module for the fedinfo Service

This module defines the configuration system for the fedinfo service, using Pydantic for
settings validation and dependency injection through AppKeys.

Settings are loaded from environment variables. The env files /etc/fedinfo/env and .env
are read when present, with .env taking precedence, and real environment variables
override both. All application components access settings and shared resources through
typed AppKeys.

Key configuration areas include:
- Listening address
- Cache snapshot location and freshness window
- Outbound request timeout
- Error reporting and metrics
"""

from typing import Final, Optional
import logging
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from aiohttp import web
from aiohttp import ClientSession

from social.graze.fedinfo.app.metrics import MetricsClient
from social.graze.fedinfo.resolve.cache import SoftwareCache


logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings for the fedinfo service.

    Environment variables map to fields by name, case-insensitively, so the
    cache_file field is set with CACHE_FILE.
    """

    model_config = SettingsConfigDict(
        env_file=("/etc/fedinfo/env", ".env"),
        extra="ignore",
    )

    debug: bool = False
    """
    Enable debug mode for verbose logging and outbound request tracing.
    Set with DEBUG=true environment variable.
    """

    listen: str = "0.0.0.0:8080"
    """
    Address to listen on, as host:port. An empty host (":8080") listens on all interfaces.
    Set with LISTEN environment variable.
    """

    cache_file: str = "cache.json"
    """
    Path of the JSON cache snapshot read at startup and written at shutdown.
    Set with CACHE_FILE environment variable.
    """

    cache_ttl: float = Field(default=3600.0, gt=0)
    """
    Seconds a resolved identity stays fresh after it was last observed.
    Set with CACHE_TTL environment variable.
    Default: 3600 (1 hour)
    """

    fetch_timeout: float = Field(default=30.0, gt=0)
    """
    Total timeout in seconds for each outbound discovery request.
    Set with FETCH_TIMEOUT environment variable.
    """

    shutdown_timeout: float = 60.0
    """
    Seconds to wait for in-flight requests to finish after a shutdown signal.
    Set with SHUTDOWN_TIMEOUT environment variable.
    Default: 60 (1 minute)
    """

    # Monitoring and error reporting
    sentry_dsn: Optional[str] = None
    """
    Sentry DSN for error reporting. Optional, no error reporting if not set.
    Set with SENTRY_DSN environment variable.
    """

    metrics_backend: str = "none"
    """
    Metrics backend, either "telegraf" or "none".
    Set with METRICS_BACKEND environment variable.
    """

    statsd_host: str = Field(alias="TELEGRAF_HOST", default="telegraf")
    """
    StatsD/Telegraf host for metrics collection.
    Set with TELEGRAF_HOST environment variable.
    """

    statsd_port: int = Field(alias="TELEGRAF_PORT", default=8125)
    """
    StatsD/Telegraf port for metrics collection.
    Set with TELEGRAF_PORT environment variable.
    """

    statsd_prefix: str = "fedinfo"
    """
    Prefix for all StatsD metrics from this service.
    Set with STATSD_PREFIX environment variable.
    """

    @field_validator("listen")
    @classmethod
    def validate_listen(cls, v: str) -> str:
        """
        Check that the listen address has the form host:port.

        Raises:
            ValueError: If the port is missing or not a valid port number
        """
        _, sep, port = v.rpartition(":")
        if not sep or not port.isdigit() or not 0 < int(port) < 65536:
            raise ValueError(f"listen must be host:port, got {v!r}")
        return v

    @property
    def http_host(self) -> str:
        host = self.listen.rpartition(":")[0].strip("[]")
        return host if host else "0.0.0.0"

    @property
    def http_port(self) -> int:
        return int(self.listen.rpartition(":")[2])


# Application context keys for dependency injection
SettingsAppKey: Final = web.AppKey("settings", Settings)
"""AppKey for accessing the application settings"""

SessionAppKey: Final = web.AppKey("http_session", ClientSession)
"""AppKey for accessing the shared aiohttp client session"""

SoftwareCacheAppKey: Final = web.AppKey("software_cache", SoftwareCache)
"""AppKey for accessing the cache of resolved software identities"""

MetricsClientAppKey: Final = web.AppKey("metrics_client", MetricsClient)
"""AppKey for the metrics client"""
