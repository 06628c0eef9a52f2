# slideshow.py - PicViewer Slideshow Scheduler
"""
Timer-driven slideshow over the navigation controller.
Supports sequence, random-folder and random-all modes
"""

import asyncio
import logging
from typing import Any, Dict, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from navigation import NavigationController

SLIDESHOW_MODES = ["sequence", "random-folder", "random-all"]
MIN_DELAY_MS = 500
DEFAULT_DELAY_MS = 3000


class SlideshowScheduler:
    """Fires one navigation action immediately and then every delay_ms"""

    def __init__(self, controller: "NavigationController", mode: str = "sequence",
                 delay_ms: int = DEFAULT_DELAY_MS, max_errors: int = 5):
        self.controller = controller
        self.logger = logging.getLogger("picviewer.slideshow")

        # Timer state
        self.active = False
        self.tick_count = 0
        self._task: Optional[asyncio.Task] = None
        self._run_id = 0
        self._in_tick = False

        self.mode = "sequence"
        self.set_mode(mode)
        self.delay_ms = self._clamp_delay(delay_ms)
        self.max_errors = max_errors

    @staticmethod
    def _clamp_delay(delay_ms: int) -> int:
        return max(MIN_DELAY_MS, int(delay_ms))

    def set_mode(self, mode: str) -> bool:
        """Set slideshow mode with validation; applies from the next tick"""
        if mode not in SLIDESHOW_MODES:
            self.logger.error(f"Invalid slideshow mode: {mode}. Valid: {SLIDESHOW_MODES}")
            return False

        self.mode = mode
        if self.active and mode != "sequence":
            self.controller.prefetch.invalidate()
        self.logger.info(f"Slideshow mode set to: {mode}")
        return True

    def set_delay(self, delay_ms: int) -> int:
        """Set tick interval in ms (minimum 500), returns the value applied"""
        self.delay_ms = self._clamp_delay(delay_ms)
        if self.delay_ms != delay_ms:
            self.logger.warning(f"Slideshow delay {delay_ms}ms raised to minimum {MIN_DELAY_MS}ms")
        return self.delay_ms

    def get_mode_description(self) -> str:
        """Get description of current slideshow mode"""
        descriptions = {
            "sequence": "Sequence - every image in leaf folder order",
            "random-folder": "Random folder - random images from the current folder",
            "random-all": "Random all - random image from a random leaf folder",
        }
        return descriptions.get(self.mode, "Unknown slideshow mode")

    @property
    def prefetch_allowed(self) -> bool:
        """Prefetch only makes sense when the next image is predictable"""
        return not self.active or self.mode == "sequence"

    def can_start(self) -> bool:
        """Check the minimum data the current mode needs"""
        image_count = len(self.controller.position.images)
        leaf_count = len(self.controller.order.leaf)

        if self.mode == "sequence":
            return image_count > 0 or leaf_count > 1
        if self.mode == "random-folder":
            return image_count > 0
        return leaf_count > 0

    async def start(self) -> bool:
        """Start the slideshow; the first action runs before this returns.

        Returns whether the slideshow is still running after that action.
        """
        if self.active:
            return True

        if not self.can_start():
            self.logger.warning(f"Not enough images to start {self.mode} slideshow")
            return False

        self.active = True
        self._run_id += 1
        run_id = self._run_id
        self.tick_count = 0

        if self.mode != "sequence":
            self.controller.prefetch.invalidate()

        self.logger.info(f"▶️  Slideshow started: {self.mode}, every {self.delay_ms}ms")
        self.controller.display.slideshow_changed(True)

        try:
            await self._tick()
        except Exception:
            self.stop()
            raise

        if self._is_current(run_id):
            self._task = asyncio.create_task(self._run(run_id))
        return self.active

    def stop(self):
        """Stop the slideshow; safe to call when already stopped"""
        if not self.active:
            return

        self.active = False
        task = self._task
        self._task = None

        # A tick in progress finishes on its own; only a sleeping timer is cancelled
        if task is not None and not task.done() and not self._in_tick \
                and task is not asyncio.current_task():
            task.cancel()

        self.logger.info(f"⏹️  Slideshow stopped after {self.tick_count} ticks")
        self.controller.display.slideshow_changed(False)

    async def toggle(self) -> bool:
        """Flip between running and stopped, returns the new state"""
        if self.active:
            self.stop()
        else:
            await self.start()
        return self.active

    def _is_current(self, run_id: int) -> bool:
        return self.active and self._run_id == run_id

    async def _run(self, run_id: int):
        """Recurring timer loop"""
        error_count = 0

        while self._is_current(run_id):
            await asyncio.sleep(self.delay_ms / 1000)
            if not self._is_current(run_id):
                break

            try:
                await self._tick()
                error_count = 0
            except Exception as e:
                error_count += 1
                self.logger.error(f"Error in slideshow tick {error_count}: {e}")

                if error_count >= self.max_errors:
                    self.logger.error(f"❌ Too many errors ({self.max_errors}), stopping slideshow")
                    if self._is_current(run_id):
                        self.stop()
                    break

    async def _tick(self):
        """Run one slideshow action for the current mode"""
        self._in_tick = True
        try:
            if self.mode == "sequence":
                await self.controller.next_image()
            elif self.mode == "random-folder":
                await self.controller.show_random_image_in_folder()
            else:
                await self.controller.show_random_image_anywhere()
            self.tick_count += 1
        finally:
            self._in_tick = False

    def get_status(self) -> Dict[str, Any]:
        """Get slideshow state"""
        return {
            "active": self.active,
            "mode": self.mode,
            "description": self.get_mode_description(),
            "delay_ms": self.delay_ms,
            "ticks": self.tick_count,
        }
