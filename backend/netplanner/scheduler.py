"""
Editor Scheduler

Uses APScheduler to refresh the device candidate list and write the
autosave slot in the background.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from netplanner.errors import StorageIOError
from netplanner.session import EditorSession

logger = logging.getLogger(__name__)

Broadcast = Callable[[list[dict]], Awaitable[None]]


class EditorScheduler:
    """Manages background jobs for one editor session."""

    def __init__(self, session: EditorSession, broadcast: Broadcast | None = None):
        self._session = session
        self._broadcast = broadcast
        self._scheduler: AsyncIOScheduler | None = None

    @property
    def running(self) -> bool:
        return bool(self._scheduler and self._scheduler.running)

    def start(self) -> None:
        """Start the scheduler with the jobs the config enables."""
        self._scheduler = AsyncIOScheduler()

        inventory = self._session.config.inventory
        snapshots = self._session.config.snapshots

        if inventory.url and inventory.refresh_interval > 0:
            self._scheduler.add_job(
                self.refresh_candidates,
                IntervalTrigger(seconds=inventory.refresh_interval),
                id="refresh_candidates",
                name="Refresh device candidates from inventory",
                replace_existing=True,
            )

        if snapshots.autosave_interval > 0:
            self._scheduler.add_job(
                self.autosave,
                IntervalTrigger(seconds=snapshots.autosave_interval),
                id="autosave",
                name="Autosave topology",
                replace_existing=True,
            )

        self._scheduler.start()
        logger.info(
            "Editor scheduler started: inventory=%ds, autosave=%ds",
            inventory.refresh_interval if inventory.url else 0,
            snapshots.autosave_interval,
        )

    async def stop(self) -> None:
        """Stop the scheduler."""
        if self._scheduler:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            logger.info("Editor scheduler stopped")

    # ─────────────────────────────────────────────────────────────────────────
    # Jobs
    # ─────────────────────────────────────────────────────────────────────────

    async def refresh_candidates(self) -> None:
        """Pull the inventory and push the new candidate count to clients."""
        controller = self._session.controller
        await controller.refresh_candidates()
        if self._broadcast:
            await self._broadcast(controller.drain_events())

    async def autosave(self) -> None:
        """Write the autosave slot if the graph changed."""
        try:
            saved = await self._session.controller.autosave_if_dirty()
        except StorageIOError as e:
            logger.error("Autosave failed: %s", e)
            return
        if saved:
            logger.debug("Autosaved topology revision %d", self._session.graph.revision)
