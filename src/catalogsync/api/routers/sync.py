"""Endpoint that triggers a catalog-to-index sync run."""

from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends

from catalogsync.api import dependencies
from catalogsync.api.dependencies import SingleFlightGuard
from catalogsync.core.errors import SyncFailedError
from catalogsync.sync.errors import CatalogSyncError
from catalogsync.sync.pipeline import SyncPipeline

logger = logging.getLogger(__name__)

router = APIRouter(tags=["sync"])

PipelineDep = Annotated[SyncPipeline, Depends(dependencies.get_sync_pipeline)]
GuardDep = Annotated[SingleFlightGuard, Depends(dependencies.get_sync_guard)]


@router.get("/sync")
async def trigger_sync(pipeline: PipelineDep, guard: GuardDep) -> dict[str, Any]:
    """Run one sync and report what was deleted and indexed."""

    async with guard.hold():
        try:
            result = await pipeline.run()
        except CatalogSyncError as exc:
            raise SyncFailedError(exc.message) from exc
        except Exception as exc:
            logger.exception("unexpected error during sync run")
            raise SyncFailedError("unexpected sync failure") from exc

    return {"success": True, "result": result.as_dict()}
