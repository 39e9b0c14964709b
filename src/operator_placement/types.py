"""
Shared data types for placement reconciliation.

This module defines the value objects that flow through one reconciliation
pass: the declared preference for a service, its observed runtime placement,
the corrective actions proposed for it and the result of the pass.

All types are frozen dataclasses. They are built fresh from each
observation and discarded once the service has been reported. Pydantic
models are reserved for snapshot parsing (see operator_placement.schema).
"""

from dataclasses import dataclass, field
from enum import Enum

# Type aliases for common patterns
InstanceId = str
"""Identifier of a database instance (e.g., "orcl1")."""


class InstanceHealth(str, Enum):
    """Health of a single database instance."""

    UP = "Up"
    DOWN = "Down"


class WarningKind(str, Enum):
    """Why a preferred instance received no corrective action."""

    TARGET_DOWN = "target_down"
    """The preferred instance is reported Down."""

    PROBE_FAILED = "probe_failed"
    """Health of the preferred instance could not be determined."""


@dataclass(frozen=True)
class ServiceKey:
    """A (database, service) pair as discovered in the cluster registry."""

    database: str
    service: str

    def __str__(self) -> str:
        return f"{self.service} ({self.database})"


@dataclass(frozen=True)
class ServiceDesired:
    """
    Administrator-declared placement for one service.

    Attributes:
        key: The (database, service) pair this preference belongs to.
        preferred: Instances the service should run on, highest priority
            first. Order is kept verbatim from the source configuration.
        available: Fallback instances, also highest priority first. May be
            empty.
    """

    key: ServiceKey
    preferred: tuple[InstanceId, ...]
    available: tuple[InstanceId, ...] = ()


@dataclass(frozen=True)
class ServiceObserved:
    """
    Runtime placement of one service.

    Attributes:
        key: The (database, service) pair this observation belongs to.
        running: Instances currently hosting the service, in the order the
            status source reported them. Empty when down.
        down: True when the service reports no running instance at all.
        instance_health: Health of the instances that had to be probed
            (preferred instances not currently running the service).
    """

    key: ServiceKey
    running: tuple[InstanceId, ...] = ()
    down: bool = False
    instance_health: dict[InstanceId, InstanceHealth] = field(
        default_factory=dict, compare=False
    )

    @classmethod
    def from_running(
        cls, key: ServiceKey, running: tuple[InstanceId, ...] | list[InstanceId]
    ) -> "ServiceObserved":
        """Build an observation where an empty running list means down."""
        running = tuple(running)
        return cls(key=key, running=running, down=not running)


@dataclass(frozen=True)
class StartService:
    """Start a fully down service on its preferred instances."""

    kind = "start_service"


@dataclass(frozen=True)
class StartOnInstance:
    """Start the service directly on a preferred instance."""

    target: InstanceId
    kind = "start_on_instance"


@dataclass(frozen=True)
class RelocateService:
    """Move the service from a running fallback instance to a preferred one."""

    source: InstanceId
    target: InstanceId
    kind = "relocate_service"


Action = StartService | StartOnInstance | RelocateService


@dataclass(frozen=True)
class PlacementWarning:
    """A preferred instance that could not be targeted by any action."""

    kind: WarningKind
    instance: InstanceId
    message: str


@dataclass(frozen=True)
class ReconciliationResult:
    """
    Outcome of reconciling one service.

    Attributes:
        desired: The preference the service was evaluated against.
        observed: The observation used, including any probed health.
        compliant: True iff the running set equals the preferred set.
        plan: Corrective actions in generation order (preferred order).
        warnings: Preferred instances skipped because they are Down or
            their health could not be probed.
    """

    desired: ServiceDesired
    observed: ServiceObserved
    compliant: bool
    plan: tuple[Action, ...] = ()
    warnings: tuple[PlacementWarning, ...] = ()

    @property
    def key(self) -> ServiceKey:
        return self.desired.key
