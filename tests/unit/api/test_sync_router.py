from __future__ import annotations

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from catalogsync.api import dependencies
from catalogsync.api.app import create_app
from catalogsync.api.dependencies import SingleFlightGuard
from catalogsync.sync.errors import CatalogFetchError, SyncError
from catalogsync.sync.models import BatchItemFailure, SyncResult

pytestmark = pytest.mark.unit


class StubPipeline:
    def __init__(
        self,
        result: SyncResult | None = None,
        exc: Exception | None = None,
    ) -> None:
        self._result = result or SyncResult(deleted=[], indexed=[])
        self._exc = exc
        self.runs = 0

    async def run(self) -> SyncResult:
        self.runs += 1
        if self._exc:
            raise self._exc
        return self._result


@pytest.fixture()
def guard() -> SingleFlightGuard:
    return SingleFlightGuard()


@pytest.fixture()
def make_client(guard: SingleFlightGuard) -> Generator:
    clients: list[TestClient] = []

    def _make(pipeline: StubPipeline) -> TestClient:
        app = create_app()
        app.dependency_overrides[dependencies.get_sync_pipeline] = lambda: pipeline
        app.dependency_overrides[dependencies.get_sync_guard] = lambda: guard
        client = TestClient(app)
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.close()


def test_sync_returns_deleted_and_indexed_ids(make_client) -> None:  # noqa: ANN001
    result = SyncResult(
        deleted=["report-5"],
        indexed=["event-1", "report-9"],
        results={"took": 4, "errors": False, "items": []},
    )
    client = make_client(StubPipeline(result=result))

    response = client.get("/sync")

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "result": {
            "deleted": ["report-5"],
            "indexed": ["event-1", "report-9"],
            "results": {"took": 4, "errors": False, "items": []},
            "failures": [],
            "skipped": [],
        },
    }


def test_partial_failures_are_part_of_a_successful_response(make_client) -> None:  # noqa: ANN001
    result = SyncResult(
        deleted=[],
        indexed=["event-1"],
        results={"errors": True},
        failures=[BatchItemFailure(os_id="event-1", action="index", status=400)],
    )
    client = make_client(StubPipeline(result=result))

    body = client.get("/sync").json()

    assert body["success"] is True
    assert body["result"]["failures"] == [
        {"os_id": "event-1", "action": "index", "status": 400, "error": None}
    ]


@pytest.mark.parametrize(
    "exc",
    [
        CatalogFetchError("catalog endpoint https://catalog/reports responded with 503"),
        SyncError("failed to reach opensearch"),
    ],
)
def test_fatal_errors_return_structured_500(make_client, exc) -> None:  # noqa: ANN001
    client = make_client(StubPipeline(exc=exc))

    response = client.get("/sync")

    assert response.status_code == 500
    assert response.json() == {"error": "Could not sync data", "message": exc.message}


def test_unexpected_errors_return_structured_500(make_client) -> None:  # noqa: ANN001
    client = make_client(StubPipeline(exc=RuntimeError("kaboom")))

    response = client.get("/sync")

    assert response.status_code == 500
    assert response.json()["error"] == "Could not sync data"


def test_overlapping_trigger_is_rejected(make_client, guard) -> None:  # noqa: ANN001
    pipeline = StubPipeline()
    client = make_client(pipeline)
    guard._running = True

    response = client.get("/sync")

    assert response.status_code == 409
    assert response.json()["error"] == "Sync already running"
    assert pipeline.runs == 0


def test_guard_is_released_after_failure(make_client, guard) -> None:  # noqa: ANN001
    client = make_client(StubPipeline(exc=SyncError("down")))

    client.get("/sync")

    assert not guard.running


def test_health_metrics_and_cors(make_client) -> None:  # noqa: ANN001
    client = make_client(StubPipeline())
    client.get("/sync")

    assert client.get("/health").json() == {"status": "ok"}
    metrics = client.get("/metrics")
    assert metrics.status_code == 200
    assert "catalogsync_runs_total" in metrics.text or "catalogsync_http" in metrics.text

    response = client.get("/sync", headers={"Origin": "https://www.example.org"})
    assert response.headers["access-control-allow-origin"] == "*"
    assert "X-Request-ID" in response.headers
