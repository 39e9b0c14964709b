"""
Observation protocol definition.

The PlacementSourceProtocol defines the interface the auditor consumes to
obtain data about a cluster. Implementations include the srvctl-backed
source (live clusters) and the snapshot-backed source (JSON exports).

Implementations must return complete snapshots or raise one of the
acquisition errors from operator_placement.errors. They must never hand
partial data to the engine.
"""

from typing import Protocol, runtime_checkable

from operator_placement.types import (
    InstanceHealth,
    InstanceId,
    ServiceDesired,
    ServiceKey,
    ServiceObserved,
)


@runtime_checkable
class PlacementSourceProtocol(Protocol):
    """
    Protocol for cluster placement data sources.

    A source provides:
    - list_services(): (database, service) pairs to audit
    - get_desired(): declared preferred/available instances
    - get_observed(): current running instances
    - probe_instance_health(): Up/Down state of a single instance
    """

    async def list_services(self, database_filter: str | None = None) -> list[ServiceKey]:
        """
        List services registered in the cluster.

        Args:
            database_filter: When given, only services of the database
                whose name matches case-insensitively are returned.

        Raises:
            RegistryUnavailableError: If the registry cannot be queried.
        """
        ...

    async def get_desired(self, key: ServiceKey) -> ServiceDesired:
        """
        Get the declared placement for a service.

        Raises:
            ConfigUnavailableError: If the configuration cannot be retrieved.
        """
        ...

    async def get_observed(self, key: ServiceKey) -> ServiceObserved:
        """
        Get the current placement of a service.

        Raises:
            StatusUnavailableError: If the status cannot be retrieved.
        """
        ...

    async def probe_instance_health(self, database: str, instance: InstanceId) -> InstanceHealth:
        """
        Get the health of one instance.

        Raises:
            ProbeFailedError: If the health cannot be determined.
        """
        ...
