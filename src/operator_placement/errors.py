"""
Exception classes for placement auditing.

Acquisition errors are raised at the observation boundary when a snapshot
of a service cannot be obtained. The auditor isolates them per service so
one service's data problem never aborts the run.

Per project patterns:
- Inherit from a common base exception
- Store context data in attributes for error handling
- Include descriptive message with relevant details
"""


class PlacementError(Exception):
    """Base class for all placement audit errors."""


class AcquisitionError(PlacementError):
    """
    Raised when the observation layer cannot return a complete snapshot.

    Attributes:
        database: Database the query was made for
        service: Service the query was made for, if any
        reason: What went wrong
    """

    label = "acquisition failed"

    def __init__(self, database: str, reason: str, service: str | None = None) -> None:
        self.database = database
        self.service = service
        self.reason = reason
        target = f"service {service} of database {database}" if service else f"database {database}"
        super().__init__(f"{self.label.capitalize()} for {target}: {reason}")


class RegistryUnavailableError(AcquisitionError):
    """Raised when the services of a cluster cannot be enumerated."""

    label = "service registry unavailable"


class ConfigUnavailableError(AcquisitionError):
    """Raised when preferred/available configuration cannot be retrieved."""

    label = "configuration unavailable"


class StatusUnavailableError(AcquisitionError):
    """Raised when the runtime status of a service cannot be retrieved."""

    label = "status unavailable"


class AmbiguousObservationError(StatusUnavailableError):
    """Raised when running-instance data is malformed or unparsable."""

    label = "status ambiguous"


class ProbeFailedError(AcquisitionError):
    """
    Raised when the health of an instance cannot be determined.

    Attributes:
        instance: The instance that was probed
    """

    label = "instance probe failed"

    def __init__(self, database: str, instance: str, reason: str) -> None:
        self.instance = instance
        super().__init__(database, f"instance {instance}: {reason}")
        self.reason = reason


class EmptyPreferenceError(PlacementError):
    """
    Raised when a service declares no preferred instances.

    A service without a preference cannot be reconciled. This is a
    configuration error, not a compliance failure.

    Attributes:
        database: Database owning the service
        service: The misconfigured service
    """

    def __init__(self, database: str, service: str) -> None:
        self.database = database
        self.service = service
        super().__init__(
            f"Service {service} of database {database} has no preferred instances; "
            f"refusing to reconcile."
        )
