"""Debounced auto-assembly.

Watches the eligible segment count of a session. When it grows, an
assemble is scheduled after a quiet period; another increase before the
timer fires restarts the timer. Triggers that arrive while a render is
running are coalesced into a single follow-up run.

If the count drops or the render fails, the auto-assembled flag is cleared
so the next increase triggers again.
"""

import asyncio
from collections.abc import Callable
from typing import TYPE_CHECKING

from docreel.config.assembly import AutoAssemblyConfig
from docreel.core.exceptions import DocReelError
from docreel.core.logging import get_logger
from docreel.models.script import Script
from docreel.services.assembly.coordinator import AssemblyCoordinator
from docreel.services.assembly.eligibility import eligible_segment_ids

if TYPE_CHECKING:
    from docreel.services.session import ScriptSession

logger = get_logger(__name__)


class AutoAssemblyScheduler:
    """Schedule assemble renders as segments become eligible.

    Example:
        >>> scheduler = AutoAssemblyScheduler(session, coordinator)
        >>> scheduler.start()
        >>> session.update(lambda s: approval.approve(s, "s1", Channel.VISUAL))
        >>> await scheduler.wait_idle()
    """

    def __init__(
        self,
        session: "ScriptSession",
        coordinator: AssemblyCoordinator,
        config: AutoAssemblyConfig | None = None,
    ) -> None:
        """Initialize AutoAssemblyScheduler.

        Args:
            session: Script session to observe
            coordinator: Coordinator that performs the render
            config: Auto-assembly configuration
        """
        self.session = session
        self.coordinator = coordinator
        self.config = config or AutoAssemblyConfig()
        self.enabled = self.config.enabled
        self.auto_assembled = False
        self._last_count = len(session.eligible_ids())
        self._count_before_trigger = self._last_count
        self._timer: asyncio.Task[None] | None = None
        self._render: asyncio.Task[None] | None = None
        self._rerun = False
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def eligible_count(self) -> int:
        """Eligible count seen at the last change."""
        return self._last_count

    @property
    def pending(self) -> bool:
        """Check if a debounce timer is waiting to fire."""
        return self._timer is not None and not self._timer.done()

    def start(self) -> None:
        """Subscribe to session changes."""
        if self._unsubscribe is None:
            self._unsubscribe = self.session.subscribe(self.on_change)

    def stop(self) -> None:
        """Unsubscribe and cancel any pending timer."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._rerun = False
        self._cancel_timer()

    def set_enabled(self, enabled: bool) -> None:
        """Toggle auto-assembly; disabling cancels a pending timer."""
        self.enabled = enabled
        if not enabled:
            self._cancel_timer()
        logger.info("Auto-assembly toggled", enabled=enabled)

    def on_change(self, old: Script, new: Script) -> None:
        """Session subscriber: react to eligible count changes."""
        count = len(eligible_segment_ids(new, self.session.resolver, self.session.config))
        previous = self._last_count
        self._last_count = count

        if count < previous:
            self.auto_assembled = False
            return
        if count == previous or not self.enabled:
            return

        self.auto_assembled = False
        if not self.pending and self._render is None:
            self._count_before_trigger = previous
        self._schedule()

    async def wait_idle(self) -> None:
        """Wait until no timer or render (including follow-ups) is pending."""
        while self.pending or self._render is not None:
            task = self._timer if self.pending else self._render
            await asyncio.gather(task, return_exceptions=True)

    # =========================================================================
    # Private helpers
    # =========================================================================

    def _schedule(self) -> None:
        self._cancel_timer()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop, auto-assembly skipped")
            return
        self._timer = loop.create_task(self._debounce())
        logger.debug(
            "Auto-assembly scheduled",
            eligible=self._last_count,
            delay=self.config.debounce_seconds,
        )

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    async def _debounce(self) -> None:
        await asyncio.sleep(self.config.debounce_seconds)
        self._timer = None
        if self._render is not None:
            # Coalesce into one follow-up run
            self._rerun = True
            return
        self._render = asyncio.current_task()
        try:
            await self._assemble()
        finally:
            self._render = None
        if self._rerun:
            self._rerun = False
            self._schedule()

    async def _assemble(self) -> None:
        self.auto_assembled = True
        logger.info("Auto-assembly started", eligible=self._last_count)
        try:
            artifact = await self.coordinator.assemble()
        except DocReelError as e:
            self.auto_assembled = False
            self._last_count = self._count_before_trigger
            logger.error("Auto-assembly failed", **e.to_dict())
            return
        if artifact is None:
            self.auto_assembled = False
        self._count_before_trigger = self._last_count


__all__ = ["AutoAssemblyScheduler"]
