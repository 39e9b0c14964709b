"""
Tests for the snapshot-backed placement source.

These tests verify SnapshotSource:
- Loads snapshots from files and from HTTP endpoints
- Rejects unreadable or schema-invalid snapshots as registry failures
- Serves desired/observed/health data per service
"""

import httpx
import pytest
from httpx import Request, Response

from operator_placement.audit import PlacementAuditor
from operator_placement.errors import (
    AmbiguousObservationError,
    ConfigUnavailableError,
    ProbeFailedError,
    RegistryUnavailableError,
    StatusUnavailableError,
)
from operator_placement.schema import ClusterSnapshot
from operator_placement.snapshot import SnapshotSource
from operator_placement.types import InstanceHealth, RelocateService, ServiceKey


class MockTransport(httpx.AsyncBaseTransport):
    """Mock transport for testing HTTP responses."""

    def __init__(self, responses: dict[str, dict]):
        """
        Initialize with mapping of paths to response data.

        Args:
            responses: Dict mapping URL paths to response data.
                       Each value should have 'status_code' and 'json' keys.
        """
        self._responses = responses

    async def handle_async_request(self, request: Request) -> Response:
        path = request.url.path
        if path in self._responses:
            resp_data = self._responses[path]
            return Response(
                status_code=resp_data.get("status_code", 200),
                json=resp_data.get("json", {}),
                request=request,
            )
        return Response(status_code=404, request=request)


class TestLoad:
    """Tests for SnapshotSource.load()."""

    @pytest.mark.asyncio
    async def test_load_from_file(self, snapshot_file):
        source = await SnapshotSource.load(snapshot_file)

        assert [db.name for db in source.snapshot.databases] == ["ORCL", "HR"]

    @pytest.mark.asyncio
    async def test_load_from_url(self, snapshot_data):
        transport = MockTransport({"/snapshot.json": {"json": snapshot_data}})
        async with httpx.AsyncClient(transport=transport) as http:
            source = await SnapshotSource.load("http://inventory/snapshot.json", http=http)

        keys = await source.list_services("hr")
        assert keys == [ServiceKey("HR", "hrsvc")]

    @pytest.mark.asyncio
    async def test_http_error_is_registry_failure(self):
        transport = MockTransport({})
        async with httpx.AsyncClient(transport=transport) as http:
            with pytest.raises(RegistryUnavailableError, match="cannot read snapshot"):
                await SnapshotSource.load("http://inventory/missing.json", http=http)

    @pytest.mark.asyncio
    async def test_missing_file_is_registry_failure(self, tmp_path):
        with pytest.raises(RegistryUnavailableError):
            await SnapshotSource.load(tmp_path / "absent.json")

    @pytest.mark.asyncio
    async def test_invalid_health_is_rejected(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text('{"databases": [{"name": "ORCL", "instances": {"orcl1": "Sleeping"}}]}')

        with pytest.raises(RegistryUnavailableError, match="invalid snapshot"):
            await SnapshotSource.load(path)

    @pytest.mark.asyncio
    async def test_duplicate_running_instances_isolated(self, tmp_path):
        """A malformed running list fails that service only; the rest is audited."""
        path = tmp_path / "dup.json"
        path.write_text(
            '{"databases": [{"name": "ORCL", "instances": {"a": "Up"}, "services": ['
            '{"name": "bad", "preferred": ["b"], "running": ["b", "b"]}, '
            '{"name": "good", "preferred": ["a"], "available": ["c"], "running": ["c"]}]}]}'
        )

        source = await SnapshotSource.load(path)
        with pytest.raises(AmbiguousObservationError):
            await source.get_observed(ServiceKey("ORCL", "bad"))

        report = await PlacementAuditor(source).run()

        bad, good = report.outcomes
        assert isinstance(bad.error, AmbiguousObservationError)
        assert good.result.plan == (RelocateService(source="c", target="a"),)
        assert report.exit_code == 2


class TestQueries:
    """Tests for the PlacementSourceProtocol methods."""

    @pytest.fixture
    def source(self, snapshot_data):
        return SnapshotSource(ClusterSnapshot.model_validate(snapshot_data))

    @pytest.mark.asyncio
    async def test_list_services_all(self, source):
        keys = await source.list_services()

        assert len(keys) == 5
        assert keys[0] == ServiceKey("ORCL", "oltp")

    @pytest.mark.asyncio
    async def test_list_services_filter(self, source):
        keys = await source.list_services("orcl")

        assert {k.service for k in keys} == {"oltp", "batch", "report", "legacy"}

    @pytest.mark.asyncio
    async def test_desired_keeps_order(self, source):
        desired = await source.get_desired(ServiceKey("ORCL", "oltp"))

        assert desired.preferred == ("orcl1", "orcl2")
        assert desired.available == ("orcl3",)

    @pytest.mark.asyncio
    async def test_empty_running_means_down(self, source):
        observed = await source.get_observed(ServiceKey("ORCL", "report"))

        assert observed.down is True
        assert observed.running == ()

    @pytest.mark.asyncio
    async def test_unknown_service(self, source):
        unknown = ServiceKey("ORCL", "nope")

        with pytest.raises(ConfigUnavailableError):
            await source.get_desired(unknown)
        with pytest.raises(StatusUnavailableError):
            await source.get_observed(unknown)

    @pytest.mark.asyncio
    async def test_probe(self, source):
        assert await source.probe_instance_health("ORCL", "orcl4") == InstanceHealth.DOWN
        assert await source.probe_instance_health("ORCL", "orcl1") == InstanceHealth.UP

        with pytest.raises(ProbeFailedError):
            await source.probe_instance_health("ORCL", "orcl9")
