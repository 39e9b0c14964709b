"""
Operator Placement

Audits where clustered database services run against the instances an
administrator declared for them, and proposes start/relocate commands to
bring drifted services back to their preferred placement. Commands are
proposed, never executed.

This package provides:

- Reconciliation engine: compliance check and action synthesis
- PlacementSourceProtocol: interface for cluster data sources
- SrvctlSource / SnapshotSource: srvctl-backed and JSON-backed sources
- PlacementAuditor: per-service audit with failure isolation
- PlacementReporter / CommandFormatter: operator-facing output
- CLI infrastructure: Typer-based command structure
"""

__version__ = "0.1.0"

from operator_placement.audit import AuditReport, PlacementAuditor, ServiceOutcome
from operator_placement.commands import CommandFormatter
from operator_placement.compliance import evaluate
from operator_placement.config import AuditSettings, SrvctlSettings
from operator_placement.engine import reconcile
from operator_placement.errors import (
    AcquisitionError,
    AmbiguousObservationError,
    ConfigUnavailableError,
    EmptyPreferenceError,
    PlacementError,
    ProbeFailedError,
    RegistryUnavailableError,
    StatusUnavailableError,
)
from operator_placement.protocols import PlacementSourceProtocol
from operator_placement.report import PlacementReporter
from operator_placement.snapshot import SnapshotSource
from operator_placement.srvctl import SrvctlSource
from operator_placement.synthesizer import RelocationSourceMode, synthesize
from operator_placement.types import (
    Action,
    InstanceHealth,
    InstanceId,
    PlacementWarning,
    ReconciliationResult,
    RelocateService,
    ServiceDesired,
    ServiceKey,
    ServiceObserved,
    StartOnInstance,
    StartService,
    WarningKind,
)

__all__ = [
    "__version__",
    # Engine
    "evaluate",
    "synthesize",
    "reconcile",
    "RelocationSourceMode",
    # Data Types
    "Action",
    "InstanceHealth",
    "InstanceId",
    "PlacementWarning",
    "ReconciliationResult",
    "RelocateService",
    "ServiceDesired",
    "ServiceKey",
    "ServiceObserved",
    "StartOnInstance",
    "StartService",
    "WarningKind",
    # Sources
    "PlacementSourceProtocol",
    "SnapshotSource",
    "SrvctlSource",
    # Audit and reporting
    "AuditReport",
    "PlacementAuditor",
    "ServiceOutcome",
    "PlacementReporter",
    "CommandFormatter",
    # Configuration
    "AuditSettings",
    "SrvctlSettings",
    # Errors
    "PlacementError",
    "AcquisitionError",
    "RegistryUnavailableError",
    "ConfigUnavailableError",
    "StatusUnavailableError",
    "AmbiguousObservationError",
    "ProbeFailedError",
    "EmptyPreferenceError",
]
