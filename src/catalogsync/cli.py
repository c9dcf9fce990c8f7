"""Command line entry point for running or triggering catalog syncs."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

import httpx

from catalogsync.core.config import AppSettings
from catalogsync.core.logging import configure_logging
from catalogsync.sync.errors import CatalogSyncError, PartialBatchFailure
from catalogsync.sync.models import SyncResult
from catalogsync.sync.pipeline import SyncPipeline


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Reconcile the search index with the upstream content catalog.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Run one sync in-process using environment settings.")
    run.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Only sync the first N catalog documents (default: CATALOG_LIMIT).",
    )
    run.add_argument(
        "--strict",
        action="store_true",
        help="Exit non-zero when the store rejected any batch item.",
    )

    trigger = sub.add_parser("trigger", help="Call /sync on a running service.")
    trigger.add_argument(
        "--base-url",
        default="http://localhost:3000",
        help="Base URL of the sync service (default: %(default)s).",
    )
    trigger.add_argument(
        "--timeout",
        type=float,
        default=300.0,
        help="HTTP timeout in seconds (default: %(default)s).",
    )

    sub.add_parser("serve", help="Serve the sync API with uvicorn.")
    return parser


async def _run_sync(settings: AppSettings, limit: int | None) -> SyncResult:
    pipeline = SyncPipeline.from_settings(settings, catalog_limit=limit)
    try:
        return await pipeline.run()
    finally:
        await pipeline.aclose()


def _run(args: argparse.Namespace) -> int:
    settings = AppSettings.load()
    configure_logging(settings.log_level, json=False)

    try:
        result = asyncio.run(_run_sync(settings, args.limit))
    except CatalogSyncError as exc:
        print(json.dumps({"error": "Could not sync data", "message": exc.message}, indent=2))
        return 1

    print(json.dumps({"success": True, "result": result.as_dict()}, indent=2))
    if args.strict:
        try:
            result.raise_for_failures()
        except PartialBatchFailure as exc:
            print(f"! {exc.message}", file=sys.stderr)
            return 2
    return 0


def _trigger(args: argparse.Namespace) -> int:
    with httpx.Client(base_url=args.base_url, timeout=args.timeout) as client:
        try:
            response = client.get("/sync")
        except httpx.HTTPError as exc:
            print(f"! request failed: {exc}", file=sys.stderr)
            return 1

    try:
        body = response.json()
    except ValueError:
        print(f"! unexpected response ({response.status_code}): {response.text}", file=sys.stderr)
        return 1

    print(json.dumps(body, indent=2))
    return 0 if response.is_success else 1


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "run":
        return _run(args)
    if args.command == "trigger":
        return _trigger(args)

    from catalogsync.api.app import main as serve

    serve()
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    raise SystemExit(main())
