"""Shared fixtures for placement tests."""

import json

import pytest

from operator_placement.errors import (
    ConfigUnavailableError,
    ProbeFailedError,
    StatusUnavailableError,
)
from operator_placement.types import (
    InstanceHealth,
    ServiceDesired,
    ServiceKey,
    ServiceObserved,
)

UP = InstanceHealth.UP
DOWN = InstanceHealth.DOWN


class FakeSource:
    """
    In-memory PlacementSourceProtocol implementation.

    Each mapping value may be an exception instance, which is raised
    instead of returned. Probe calls are recorded in `probed`.
    """

    def __init__(self, desired=None, observed=None, health=None, keys=None):
        self.desired = desired or {}
        self.observed = observed or {}
        self.health = health or {}
        self.keys = keys if keys is not None else list(self.desired)
        self.probed: list[tuple[str, str]] = []

    async def list_services(self, database_filter=None):
        if database_filter is None:
            return list(self.keys)
        return [k for k in self.keys if k.database.lower() == database_filter.lower()]

    async def get_desired(self, key):
        value = self.desired[key]
        if isinstance(value, Exception):
            raise value
        return value

    async def get_observed(self, key):
        value = self.observed[key]
        if isinstance(value, Exception):
            raise value
        return value

    async def probe_instance_health(self, database, instance):
        self.probed.append((database, instance))
        value = self.health.get(instance)
        if value is None:
            raise ProbeFailedError(database, instance, "unknown instance")
        if isinstance(value, Exception):
            raise value
        return value


def make_probe(health):
    """Build a synchronous probe from an instance -> health mapping."""

    def probe(instance):
        value = health.get(instance)
        if value is None:
            raise ProbeFailedError("ORCL", instance, "unknown instance")
        if isinstance(value, Exception):
            raise value
        return value

    return probe


def failing_probe(instance):
    raise AssertionError(f"probe must not be called (asked for {instance})")


@pytest.fixture
def key():
    return ServiceKey(database="ORCL", service="oltp")


@pytest.fixture
def desired_ab(key):
    """Preferred [A, B], available [C, D]."""
    return ServiceDesired(key=key, preferred=("A", "B"), available=("C", "D"))


@pytest.fixture
def fake_source_factory():
    return FakeSource


@pytest.fixture
def two_service_source():
    """First service fails status acquisition, second drifts onto C."""
    broken = ServiceKey(database="ORCL", service="batch")
    healthy = ServiceKey(database="ORCL", service="oltp")
    return FakeSource(
        desired={
            broken: ServiceDesired(key=broken, preferred=("A",)),
            healthy: ServiceDesired(key=healthy, preferred=("A", "B"), available=("C", "D")),
        },
        observed={
            broken: StatusUnavailableError("ORCL", "srvctl timed out", service="batch"),
            healthy: ServiceObserved(key=healthy, running=("C",)),
        },
        health={"A": UP, "B": UP},
        keys=[broken, healthy],
    )


@pytest.fixture
def snapshot_data():
    """Snapshot with one compliant, one drifted, one down and one misconfigured service."""
    return {
        "databases": [
            {
                "name": "ORCL",
                "instances": {"orcl1": "Up", "orcl2": "Up", "orcl3": "Up", "orcl4": "Down"},
                "services": [
                    {"name": "oltp", "preferred": ["orcl1", "orcl2"], "available": ["orcl3"], "running": ["orcl2", "orcl1"]},
                    {"name": "batch", "preferred": ["orcl1", "orcl2"], "available": ["orcl3"], "running": ["orcl3"]},
                    {"name": "report", "preferred": ["orcl2"], "available": [], "running": []},
                    {"name": "legacy", "preferred": [], "available": ["orcl3"], "running": ["orcl3"]},
                ],
            },
            {
                "name": "HR",
                "instances": {"hr1": "Up"},
                "services": [
                    {"name": "hrsvc", "preferred": ["hr1"], "available": [], "running": ["hr1"]},
                ],
            },
        ]
    }


@pytest.fixture
def snapshot_file(tmp_path, snapshot_data):
    path = tmp_path / "cluster.json"
    path.write_text(json.dumps(snapshot_data), encoding="utf-8")
    return path


@pytest.fixture
def config_error():
    return ConfigUnavailableError("ORCL", "PRCD-1120", service="oltp")
