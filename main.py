# main.py - PicViewer
"""
PicViewer - browse nested image folders as one continuous slideshow.
Headless host: loads the configured (or chosen) root folder and runs the
slideshow, reporting every image through the display sink.
"""

import asyncio
import logging
import random
import signal
import sys
from typing import Optional

from config import PicViewerConfig
from dialog import select_root_folder
from display import ViewerDisplay
from errors import DialogCancelled, DialogFailed, NotADirectory, StatFailed
from logger import setup_logger
from navigation import NavigationController


class PicViewer:
    """Main PicViewer application class"""

    def __init__(self, config_path: str = "config.toml", display: Optional[ViewerDisplay] = None):
        self.config = PicViewerConfig.from_file(config_path)

        # Setup logging
        self.logger = setup_logger(self.config.log_level, self.config.log_file)

        rng = random.Random(self.config.random_seed)
        self.controller = NavigationController(
            display=display or ViewerDisplay(),
            rng=rng,
            prefetch_enabled=self.config.prefetch_enabled,
            output_format=self.config.output_format,
            slideshow_mode=self.config.slideshow_mode,
            slideshow_delay=self.config.slideshow_delay,
        )

        # State
        self.running = False
        self.shutdown_requested = False

        self.logger.info("PicViewer initialized")

    def _setup_signal_handlers(self):
        """Setup graceful shutdown signal handlers"""
        loop = asyncio.get_running_loop()

        def signal_handler(signum: int):
            self.logger.info(f"Received signal {signal.Signals(signum).name}")
            self.shutdown_requested = True

        for signum in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(signum, signal_handler, signum)
            except (NotImplementedError, RuntimeError):
                # Windows event loops have no signal handler support
                pass

    async def resolve_root(self) -> str:
        """Configured root folder, or ask for one"""
        root = self.config.get_root_folder()
        if root:
            return root

        # Tk must run on the main thread, before the controller starts
        root = select_root_folder()
        if not root:
            raise DialogCancelled("no folder selected")
        return root

    async def start(self):
        """Load the root folder and run the slideshow until it ends or a signal arrives"""
        self._setup_signal_handlers()
        self.logger.info("🚀 Starting PicViewer...")
        self.running = True

        try:
            root = await self.resolve_root()
            await self.controller.load_root(root)

            if self.config.slideshow_autostart:
                await self.controller.slideshow.start()
            else:
                self.logger.info("Slideshow autostart disabled; showing first folder only")

            await self._main_loop()

        finally:
            await self.stop()

    async def _main_loop(self):
        """Wait while the slideshow is running"""
        while self.running and not self.shutdown_requested:
            if not self.controller.slideshow.active:
                break
            await asyncio.sleep(0.1)

        self.logger.info("🏁 Main loop finished")

    async def stop(self):
        """Stop slideshow and background work"""
        if not self.running:
            return
        self.running = False
        await self.controller.close()
        self.logger.info(f"Final state: {self.controller.get_navigation_info()}")


async def main(config_path: str = "config.toml") -> int:
    """Main entry point"""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    logger = logging.getLogger("picviewer.main")

    try:
        viewer = PicViewer(config_path)
        await viewer.start()

    except DialogCancelled:
        logger.info("No folder selected, exiting")
        return 0

    except (DialogFailed, NotADirectory, StatFailed) as e:
        logger.error(f"💥 Could not open picture folder: {e}")
        return 1

    logger.info("👋 PicViewer shutdown complete")
    return 0


def run():
    """Console script entry point"""
    config_path = sys.argv[1] if len(sys.argv) > 1 else "config.toml"
    try:
        sys.exit(asyncio.run(main(config_path)))
    except KeyboardInterrupt:
        print("\n🛑 Shutdown requested by user")


if __name__ == "__main__":
    run()
