"""
Snapshot-backed placement source.

SnapshotSource implements PlacementSourceProtocol over a ClusterSnapshot
document loaded from a file or fetched from an HTTP endpoint. It allows
audits against exported inventories and deterministic fixtures.

HTTP fetching uses an injected httpx.AsyncClient when one is given, so
tests can provide a mock transport.
"""

import json
import logging
from pathlib import Path

import httpx
from pydantic import ValidationError

from operator_placement.errors import (
    AmbiguousObservationError,
    ConfigUnavailableError,
    ProbeFailedError,
    RegistryUnavailableError,
    StatusUnavailableError,
)
from operator_placement.schema import ClusterSnapshot, DatabaseSnapshot, ServiceSnapshot
from operator_placement.types import (
    InstanceHealth,
    InstanceId,
    ServiceDesired,
    ServiceKey,
    ServiceObserved,
)

logger = logging.getLogger(__name__)


def _is_url(location: str) -> bool:
    return location.startswith(("http://", "https://"))


class SnapshotSource:
    """
    Placement source backed by an in-memory ClusterSnapshot.

    Example:
        source = await SnapshotSource.load("cluster.json")
        keys = await source.list_services()
    """

    def __init__(self, snapshot: ClusterSnapshot) -> None:
        self.snapshot = snapshot

    @classmethod
    async def load(
        cls,
        location: str | Path,
        http: httpx.AsyncClient | None = None,
        timeout_s: float = 10.0,
    ) -> "SnapshotSource":
        """
        Load a snapshot from a path or an http(s) URL.

        Args:
            location: Filesystem path or URL of the JSON document
            http: Optional pre-configured client used for URLs
            timeout_s: Timeout for the client created when http is None

        Raises:
            RegistryUnavailableError: If the document cannot be read or
                does not match the snapshot schema.
        """
        location = str(location)
        try:
            if _is_url(location):
                data = await cls._fetch(location, http, timeout_s)
            else:
                data = json.loads(Path(location).read_text(encoding="utf-8"))
            snapshot = ClusterSnapshot.model_validate(data)
        except (OSError, ValueError, httpx.HTTPError) as e:
            # ValidationError and JSONDecodeError are both ValueErrors
            kind = "invalid snapshot" if isinstance(e, ValidationError) else "cannot read snapshot"
            raise RegistryUnavailableError(location, f"{kind}: {e}") from e

        logger.debug(f"Loaded snapshot from {location} with {len(snapshot.databases)} database(s)")
        return cls(snapshot)

    @staticmethod
    async def _fetch(url: str, http: httpx.AsyncClient | None, timeout_s: float) -> object:
        if http is not None:
            response = await http.get(url)
            response.raise_for_status()
            return response.json()
        async with httpx.AsyncClient(timeout=timeout_s) as client:
            response = await client.get(url)
            response.raise_for_status()
            return response.json()

    def _database(self, name: str) -> DatabaseSnapshot | None:
        for database in self.snapshot.databases:
            if database.name == name:
                return database
        return None

    def _service(self, key: ServiceKey) -> ServiceSnapshot | None:
        database = self._database(key.database)
        if database is None:
            return None
        for service in database.services:
            if service.name == key.service:
                return service
        return None

    async def list_services(self, database_filter: str | None = None) -> list[ServiceKey]:
        wanted = database_filter.lower() if database_filter is not None else None
        return [
            ServiceKey(database=database.name, service=service.name)
            for database in self.snapshot.databases
            if wanted is None or database.name.lower() == wanted
            for service in database.services
        ]

    async def get_desired(self, key: ServiceKey) -> ServiceDesired:
        service = self._service(key)
        if service is None:
            raise ConfigUnavailableError(key.database, "service not in snapshot", service=key.service)
        return ServiceDesired(
            key=key,
            preferred=tuple(service.preferred),
            available=tuple(service.available),
        )

    async def get_observed(self, key: ServiceKey) -> ServiceObserved:
        service = self._service(key)
        if service is None:
            raise StatusUnavailableError(key.database, "service not in snapshot", service=key.service)
        if len(set(service.running)) != len(service.running):
            raise AmbiguousObservationError(
                key.database,
                f"running instances contain duplicates: {service.running}",
                service=key.service,
            )
        return ServiceObserved.from_running(key, service.running)

    async def probe_instance_health(self, database: str, instance: InstanceId) -> InstanceHealth:
        snapshot = self._database(database)
        if snapshot is None or instance not in snapshot.instances:
            raise ProbeFailedError(database, instance, "instance not in snapshot")
        return snapshot.instances[instance]
