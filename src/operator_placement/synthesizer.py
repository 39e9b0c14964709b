"""
Corrective action synthesis for non-compliant services.

For every preferred instance not running the service, the synthesizer
either relocates the service there from a running fallback instance or
starts it there directly. Preferred instances that are Down, or whose
health cannot be probed, get a warning instead of an action.

Relocation sources are searched over the available list in reverse
priority order with the last match kept, which selects the
highest-priority fallback instance still running the service. A fallback
instance is used as a source at most once per pass, and no source
appears in more than one relocation of a plan.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum

from operator_placement.errors import ProbeFailedError
from operator_placement.types import (
    Action,
    InstanceHealth,
    InstanceId,
    PlacementWarning,
    RelocateService,
    ServiceDesired,
    ServiceObserved,
    StartOnInstance,
    StartService,
    WarningKind,
)

logger = logging.getLogger(__name__)

HealthProbe = Callable[[InstanceId], InstanceHealth]
"""Returns the health of an instance; raises ProbeFailedError if unknown."""


class RelocationSourceMode(str, Enum):
    """What to name as the source of a relocation."""

    SINGLE = "single"
    """The one fallback instance the service is moved away from."""

    CURRENT_LIST = "current-list"
    """
    The comma-joined list of every instance currently running the service.

    The list is the same for every target, so at most one relocation per
    plan names it; later targets with a matched source are started directly.
    """


@dataclass(frozen=True)
class Synthesis:
    """Actions and warnings produced for one service."""

    plan: tuple[Action, ...] = ()
    warnings: tuple[PlacementWarning, ...] = ()


def select_source(
    available: Iterable[InstanceId],
    running: set[InstanceId],
    used: set[InstanceId],
) -> InstanceId | None:
    """
    Pick the fallback instance to relocate the service away from.

    Scans the available list from lowest to highest priority and keeps the
    last instance that is running the service and not yet used as a
    source. The whole list is always scanned.

    Returns:
        The chosen instance, or None if no fallback instance qualifies.
    """
    source = None
    for candidate in reversed(list(available)):
        if candidate in running and candidate not in used:
            source = candidate
    return source


def synthesize(
    desired: ServiceDesired,
    observed: ServiceObserved,
    probe: HealthProbe,
    source_mode: RelocationSourceMode = RelocationSourceMode.SINGLE,
) -> Synthesis:
    """
    Build the corrective plan for a non-compliant service.

    Args:
        desired: Declared placement, preferred list must be non-empty
        observed: Current placement snapshot
        probe: Health probe for preferred instances not running the service
        source_mode: How relocation sources are named in the plan

    Returns:
        Synthesis with actions in preferred-instance order and a warning
        for every preferred instance that could not be targeted.
    """
    if observed.down:
        return Synthesis(plan=(StartService(),))

    running = set(observed.running)
    used: set[InstanceId] = set()
    list_relocated = False
    plan: list[Action] = []
    warnings: list[PlacementWarning] = []

    for target in desired.preferred:
        if target in running:
            continue

        try:
            health = probe(target)
        except ProbeFailedError as e:
            logger.debug(f"{desired.key}: skipping {target}, probe failed: {e.reason}")
            warnings.append(
                PlacementWarning(
                    kind=WarningKind.PROBE_FAILED,
                    instance=target,
                    message=f"Cannot determine health of preferred instance {target}: {e.reason}",
                )
            )
            continue

        if health == InstanceHealth.DOWN:
            logger.debug(f"{desired.key}: skipping {target}, instance is down")
            warnings.append(
                PlacementWarning(
                    kind=WarningKind.TARGET_DOWN,
                    instance=target,
                    message=f"Preferred instance {target} is down; cannot start or relocate there",
                )
            )
            continue

        source = select_source(desired.available, running, used)
        if source is not None and list_relocated:
            logger.debug(f"{desired.key}: current list already relocated, starting {target} directly")
            used.add(source)
            plan.append(StartOnInstance(target=target))
            continue
        if source is None:
            logger.debug(f"{desired.key}: no fallback source for {target}, starting directly")
            plan.append(StartOnInstance(target=target))
            continue

        used.add(source)
        if source_mode == RelocationSourceMode.CURRENT_LIST:
            named_source = ",".join(observed.running)
            list_relocated = True
        else:
            named_source = source
        logger.debug(f"{desired.key}: relocating from {named_source} to {target}")
        plan.append(RelocateService(source=named_source, target=target))

    return Synthesis(plan=tuple(plan), warnings=tuple(warnings))
