"""Default server implementation managed by the bootstrap.

Exports:
    Server: Protocol every managed server implements
    CommunityServer: Data store plus HTTP endpoint
    DataStore: SQLite store guarded by a location lock
    HttpEndpoint: aiohttp site on a private event loop thread
    HealthStatus: Response payload for the health endpoint
    create_app: Factory function to create the aiohttp Application
"""

from server_bootstrap.server.base import Server
from server_bootstrap.server.community import CommunityServer
from server_bootstrap.server.http import HealthStatus, HttpEndpoint, create_app
from server_bootstrap.server.store import DataStore

__all__ = [
    "CommunityServer",
    "DataStore",
    "HealthStatus",
    "HttpEndpoint",
    "Server",
    "create_app",
]
