"""Bootstrap variant descriptors.

A variant decides which concrete server the orchestrator builds. Variants
declare capabilities explicitly; one variant specializes another when its
capability set is a proper superset of the other's.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from server_bootstrap.server.community import CommunityServer

if TYPE_CHECKING:
    from server_bootstrap.config.models import BootstrapConfig
    from server_bootstrap.logging.service import LoggingService
    from server_bootstrap.server.base import Server

ServerFactory = Callable[["BootstrapConfig", "LoggingService"], "Server"]


@dataclass(frozen=True)
class BootstrapVariant:
    """A registered way of constructing the managed server."""

    name: str
    server_factory: ServerFactory
    capabilities: frozenset[str] = field(default_factory=frozenset)
    description: str = ""

    def is_more_specialized_than(self, other: BootstrapVariant) -> bool:
        """True if this variant refines ``other``.

        Not a total order: two variants that each add a different capability
        to the same base are unrelated, and neither is more specialized.
        """
        return self.capabilities > other.capabilities

    def create_server(
        self, config: BootstrapConfig, logging_service: LoggingService
    ) -> Server:
        return self.server_factory(config, logging_service)


def create_community_server(
    config: BootstrapConfig, logging_service: LoggingService
) -> CommunityServer:
    return CommunityServer(
        config,
        log=logging_service.get_messages_log(CommunityServer),
        variant_name=COMMUNITY_VARIANT.name,
    )


COMMUNITY_VARIANT = BootstrapVariant(
    name="community",
    server_factory=create_community_server,
    capabilities=frozenset({"community"}),
    description="Data store with an HTTP health endpoint",
)
