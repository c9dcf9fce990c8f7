"""Dependency wiring for the sync API."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from functools import lru_cache

from catalogsync.core.config import AppSettings
from catalogsync.core.errors import ConflictError
from catalogsync.sync.pipeline import SyncPipeline

logger = logging.getLogger(__name__)


class SingleFlightGuard:
    """Allow at most one sync run at a time within the process.

    Two overlapping runs could race on the delete/upsert diff, so a second
    trigger is rejected instead of queued.
    """

    def __init__(self) -> None:
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    @asynccontextmanager
    async def hold(self) -> AsyncIterator[None]:
        if self._running:
            raise ConflictError("a sync run is already in progress")
        self._running = True
        try:
            yield
        finally:
            self._running = False


@lru_cache
def get_settings() -> AppSettings:
    """Return cached ``AppSettings`` instance."""

    return AppSettings.load()


@lru_cache
def get_sync_pipeline() -> SyncPipeline:
    """Build (or reuse) the pipeline and its HTTP clients."""

    settings = get_settings()
    if not settings.catalog.endpoints:
        logger.warning("no catalog endpoints configured; every sync will empty the index")
    return SyncPipeline.from_settings(settings)


@lru_cache
def get_sync_guard() -> SingleFlightGuard:
    return SingleFlightGuard()


async def close_sync_pipeline() -> None:
    """Release the pipeline's clients if one was created."""

    if get_sync_pipeline.cache_info().currsize:
        await get_sync_pipeline().aclose()
        get_sync_pipeline.cache_clear()
