"""
srvctl-backed placement source.

Provides SrvctlSource, a PlacementSourceProtocol implementation that
queries a clustered database through the srvctl command-line tool.

All invocations use asyncio.create_subprocess_exec with array arguments
(never a shell) and the environment built by SrvctlSettings. Timeouts,
missing binaries, non-zero exit codes and unparsable output are converted
into the matching acquisition error so that the engine never sees partial
data.
"""

import asyncio
import logging
from collections.abc import Callable

from operator_placement.config import SrvctlSettings
from operator_placement.errors import (
    AcquisitionError,
    AmbiguousObservationError,
    ConfigUnavailableError,
    ProbeFailedError,
    RegistryUnavailableError,
    StatusUnavailableError,
)
from operator_placement.srvctl_parser import (
    parse_databases,
    parse_instance_status,
    parse_service_config,
    parse_service_names,
    parse_service_status,
)
from operator_placement.types import (
    InstanceHealth,
    InstanceId,
    ServiceDesired,
    ServiceKey,
    ServiceObserved,
)

logger = logging.getLogger(__name__)

ErrorFactory = Callable[[str], AcquisitionError]


class SrvctlSource:
    """
    Placement source that shells out to srvctl.

    Example:
        source = SrvctlSource(SrvctlSettings(oracle_home=Path("/u01/app/oracle/product/19c")))
        keys = await source.list_services("ORCL")
        desired = await source.get_desired(keys[0])
    """

    def __init__(self, settings: SrvctlSettings | None = None) -> None:
        """
        Initialize source.

        Args:
            settings: How to invoke srvctl, defaults to SrvctlSettings()
        """
        self.settings = settings or SrvctlSettings()

    async def _run(self, args: list[str], error: ErrorFactory) -> str:
        """
        Run srvctl with the given arguments and return its stdout.

        Raises:
            AcquisitionError: Built by `error` on timeout, spawn failure or
                non-zero exit.
        """
        executable = self.settings.executable()
        logger.debug(f"Running {executable} {' '.join(args)}")

        try:
            proc = await asyncio.create_subprocess_exec(
                executable,
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=self.settings.command_env(),
            )
        except OSError as e:
            raise error(f"cannot execute {executable}: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(
                proc.communicate(), timeout=self.settings.timeout_s
            )
        except asyncio.TimeoutError as e:
            proc.kill()
            await proc.wait()
            raise error(f"srvctl {args[0]} {args[1]} timed out after {self.settings.timeout_s}s") from e

        out = stdout.decode("utf-8", errors="replace")
        if proc.returncode != 0:
            detail = stderr.decode("utf-8", errors="replace").strip() or out.strip()
            raise error(f"srvctl exited with {proc.returncode}: {detail}")
        return out

    async def list_services(self, database_filter: str | None = None) -> list[ServiceKey]:
        """
        List (database, service) pairs known to the cluster.

        Raises:
            RegistryUnavailableError: If databases or services cannot be listed.
        """
        scope = database_filter or "*"
        output = await self._run(
            ["config", "database"],
            lambda reason: RegistryUnavailableError(scope, reason),
        )
        databases = parse_databases(output)
        if database_filter is not None:
            wanted = database_filter.lower()
            databases = [db for db in databases if db.lower() == wanted]

        keys: list[ServiceKey] = []
        for database in databases:
            output = await self._run(
                ["config", "service", "-d", database],
                lambda reason, db=database: RegistryUnavailableError(db, reason),
            )
            keys.extend(ServiceKey(database=database, service=name) for name in parse_service_names(output))

        logger.debug(f"Discovered {len(keys)} service(s) in {len(databases)} database(s)")
        return keys

    async def get_desired(self, key: ServiceKey) -> ServiceDesired:
        """
        Read preferred/available instances of a service.

        Raises:
            ConfigUnavailableError: On srvctl failure or unrecognised output.
        """
        output = await self._run(
            ["config", "service", "-d", key.database, "-s", key.service],
            lambda reason: ConfigUnavailableError(key.database, reason, service=key.service),
        )
        config = parse_service_config(output)
        if config is None:
            raise ConfigUnavailableError(
                key.database, "no preferred instance line in srvctl output", service=key.service
            )
        return ServiceDesired(
            key=key,
            preferred=tuple(config.preferred),
            available=tuple(config.available),
        )

    async def get_observed(self, key: ServiceKey) -> ServiceObserved:
        """
        Read the instances currently running a service.

        Raises:
            StatusUnavailableError: On srvctl failure.
            AmbiguousObservationError: On unrecognised output.
        """
        output = await self._run(
            ["status", "service", "-d", key.database, "-s", key.service],
            lambda reason: StatusUnavailableError(key.database, reason, service=key.service),
        )
        status = parse_service_status(output)
        if status is None:
            raise AmbiguousObservationError(
                key.database, f"unrecognised status output: {output.strip()!r}", service=key.service
            )
        return ServiceObserved(key=key, running=tuple(status.running), down=status.down)

    async def probe_instance_health(self, database: str, instance: InstanceId) -> InstanceHealth:
        """
        Check whether an instance is running.

        Raises:
            ProbeFailedError: On srvctl failure or unrecognised output.
        """
        output = await self._run(
            ["status", "instance", "-d", database, "-i", instance],
            lambda reason: ProbeFailedError(database, instance, reason),
        )
        health = parse_instance_status(output, instance)
        if health is None:
            raise ProbeFailedError(database, instance, f"unrecognised status output: {output.strip()!r}")
        return health
