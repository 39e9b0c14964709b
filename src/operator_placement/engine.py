"""
Reconciliation engine entry point.

Combines the compliance check and the action synthesizer into a single
pure function over one service's snapshot. The engine performs no I/O of
its own; instance health is obtained through the injected probe.
"""

import logging

from operator_placement.compliance import evaluate
from operator_placement.errors import EmptyPreferenceError
from operator_placement.synthesizer import HealthProbe, RelocationSourceMode, synthesize
from operator_placement.types import ReconciliationResult, ServiceDesired, ServiceObserved

logger = logging.getLogger(__name__)


def reconcile(
    desired: ServiceDesired,
    observed: ServiceObserved,
    probe: HealthProbe,
    source_mode: RelocationSourceMode = RelocationSourceMode.SINGLE,
) -> ReconciliationResult:
    """
    Reconcile one service's placement against its preference.

    Args:
        desired: Declared preferred/available instances
        observed: Current placement snapshot
        probe: Health probe used only when the service is non-compliant
        source_mode: How relocation sources are named in the plan

    Returns:
        ReconciliationResult with the compliance verdict and the plan.
        Compliant services get an empty plan and are never probed.

    Raises:
        EmptyPreferenceError: If the service declares no preferred instances.
    """
    if not desired.preferred:
        raise EmptyPreferenceError(desired.key.database, desired.key.service)

    if evaluate(desired, observed):
        logger.debug(f"{desired.key}: compliant on {', '.join(desired.preferred)}")
        return ReconciliationResult(desired=desired, observed=observed, compliant=True)

    synthesis = synthesize(desired, observed, probe, source_mode=source_mode)
    return ReconciliationResult(
        desired=desired,
        observed=observed,
        compliant=False,
        plan=synthesis.plan,
        warnings=synthesis.warnings,
    )
