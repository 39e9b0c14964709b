"""
PlacementAuditor for auditing every service of a cluster.

This module implements the audit run that:
- Discovers services through a PlacementSourceProtocol
- Captures one desired/observed snapshot per service
- Probes health only for preferred instances not running the service
- Reconciles each service with the pure engine
- Isolates per-service failures so the rest of the run continues

Services are audited one at a time; no state is shared between them.
"""

import logging
from dataclasses import dataclass, field, replace

from operator_placement.compliance import evaluate
from operator_placement.config import AuditSettings
from operator_placement.engine import reconcile
from operator_placement.errors import (
    AcquisitionError,
    EmptyPreferenceError,
    PlacementError,
    ProbeFailedError,
)
from operator_placement.protocols import PlacementSourceProtocol
from operator_placement.synthesizer import HealthProbe
from operator_placement.types import (
    InstanceHealth,
    InstanceId,
    ReconciliationResult,
    ServiceDesired,
    ServiceKey,
    ServiceObserved,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceOutcome:
    """
    Result of auditing one service.

    Exactly one of result and error is set.

    Attributes:
        key: The audited (database, service) pair
        result: Reconciliation result when the service could be evaluated
        error: Why the service could not be evaluated
    """

    key: ServiceKey
    result: ReconciliationResult | None = None
    error: PlacementError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class AuditReport:
    """All service outcomes of one audit run, in audit order."""

    outcomes: list[ServiceOutcome] = field(default_factory=list)

    @property
    def results(self) -> list[ReconciliationResult]:
        return [o.result for o in self.outcomes if o.result is not None]

    @property
    def failures(self) -> list[ServiceOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def non_compliant(self) -> list[ReconciliationResult]:
        return [r for r in self.results if not r.compliant]

    @property
    def exit_code(self) -> int:
        """0 when everything is compliant, 1 on drift, 2 when any service failed."""
        if self.failures:
            return 2
        if self.non_compliant:
            return 1
        return 0


class PlacementAuditor:
    """
    Audits service placement against declared preferences.

    Example:
        source = SrvctlSource(SrvctlSettings(oracle_home=home))
        auditor = PlacementAuditor(source, AuditSettings(database_filter="ORCL"))
        report = await auditor.run()
        for result in report.non_compliant:
            print(result.key, result.plan)
    """

    def __init__(
        self,
        source: PlacementSourceProtocol,
        settings: AuditSettings | None = None,
    ) -> None:
        """
        Initialize auditor.

        Args:
            source: Any PlacementSourceProtocol implementation
            settings: Audit options, defaults to AuditSettings()
        """
        self.source = source
        self.settings = settings or AuditSettings()

    async def run(self, database_filter: str | None = None) -> AuditReport:
        """
        Audit every discovered service.

        Args:
            database_filter: Overrides settings.database_filter when given

        Returns:
            AuditReport with one outcome per discovered service.

        Raises:
            RegistryUnavailableError: If services cannot be enumerated.
        """
        database_filter = database_filter or self.settings.database_filter
        keys = await self.source.list_services(database_filter)
        logger.debug(f"Auditing {len(keys)} service(s)")

        report = AuditReport()
        for key in keys:
            report.outcomes.append(await self.audit_service(key))
        return report

    async def audit_service(self, key: ServiceKey) -> ServiceOutcome:
        """
        Observe and reconcile a single service.

        Acquisition failures and empty preferences are captured in the
        outcome instead of being raised.
        """
        try:
            desired = await self.source.get_desired(key)
            observed = await self.source.get_observed(key)
            observed, probe = await self._probe_candidates(desired, observed)
            result = reconcile(
                desired,
                observed,
                probe,
                source_mode=self.settings.relocation_source_mode,
            )
        except (AcquisitionError, EmptyPreferenceError) as e:
            logger.warning(f"Skipping {key}: {e}")
            return ServiceOutcome(key=key, error=e)

        logger.debug(
            f"{key}: {'compliant' if result.compliant else 'non-compliant'}, "
            f"{len(result.plan)} action(s), {len(result.warnings)} warning(s)"
        )
        return ServiceOutcome(key=key, result=result)

    async def _probe_candidates(
        self, desired: ServiceDesired, observed: ServiceObserved
    ) -> tuple[ServiceObserved, HealthProbe]:
        """
        Probe the preferred instances the synthesizer may target.

        Only preferred instances not currently running the service are
        probed, and only when the service is up and non-compliant.

        Returns:
            The observation with instance_health filled in, and a probe
            answering from the collected results.
        """
        database = desired.key.database
        health: dict[InstanceId, InstanceHealth] = {}
        failed: dict[InstanceId, ProbeFailedError] = {}

        if desired.preferred and not observed.down and not evaluate(desired, observed):
            running = set(observed.running)
            for instance in desired.preferred:
                if instance in running:
                    continue
                try:
                    health[instance] = await self.source.probe_instance_health(database, instance)
                except ProbeFailedError as e:
                    logger.debug(f"Probe of {instance} in {database} failed: {e.reason}")
                    failed[instance] = e

        def probe(instance: InstanceId) -> InstanceHealth:
            if instance in failed:
                raise failed[instance]
            if instance not in health:
                raise ProbeFailedError(database, instance, "instance was not probed")
            return health[instance]

        return replace(observed, instance_health=health), probe
