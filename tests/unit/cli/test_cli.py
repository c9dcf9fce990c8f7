from __future__ import annotations

import json

import pytest

from catalogsync import cli
from catalogsync.sync.errors import CatalogFetchError
from catalogsync.sync.models import BatchItemFailure, SyncResult

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch) -> None:
    monkeypatch.setattr(cli, "configure_logging", lambda *args, **kwargs: None)


def stub_run_sync(monkeypatch, outcome) -> list:  # noqa: ANN001
    seen: list = []

    async def fake_run_sync(settings, limit):  # noqa: ANN001, ANN202
        seen.append(limit)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    monkeypatch.setattr(cli, "_run_sync", fake_run_sync)
    return seen


def test_parser_requires_a_command() -> None:
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args([])


def test_run_prints_result_and_passes_limit(monkeypatch, capsys) -> None:
    seen = stub_run_sync(
        monkeypatch, SyncResult(deleted=["report-5"], indexed=["event-1"])
    )

    exit_code = cli.main(["run", "--limit", "10"])

    assert exit_code == 0
    assert seen == [10]
    body = json.loads(capsys.readouterr().out)
    assert body["success"] is True
    assert body["result"]["deleted"] == ["report-5"]


def test_run_reports_fatal_errors(monkeypatch, capsys) -> None:
    stub_run_sync(monkeypatch, CatalogFetchError("catalog endpoint responded with 502"))

    exit_code = cli.main(["run"])

    assert exit_code == 1
    body = json.loads(capsys.readouterr().out)
    assert body == {
        "error": "Could not sync data",
        "message": "catalog endpoint responded with 502",
    }


def test_strict_run_fails_on_partial_batch(monkeypatch) -> None:
    result = SyncResult(
        deleted=[],
        indexed=["event-1"],
        failures=[BatchItemFailure(os_id="event-1", action="index", status=400)],
    )
    stub_run_sync(monkeypatch, result)

    assert cli.main(["run"]) == 0
    assert cli.main(["run", "--strict"]) == 2
