# prefetch.py - PicViewer Prefetch Cache
"""
Single-slot cache holding the image the next sequential advance will show.

Fetches run as background asyncio tasks stamped with the navigation
generation they were issued for. A result whose generation is no longer
current is dropped instead of stored.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from image_source import ImagePayload

logger = logging.getLogger("picviewer.prefetch")


@dataclass
class PreloadSlot:
    """Prefetched image for (folder, index)"""
    folder: str
    index: int
    payload: ImagePayload
    generation: int
    images: Optional[List[str]] = None  # listing of folder when it differs from the current one


class PrefetchCache:
    """Holds at most one prefetched image"""

    def __init__(self,
                 list_images: Callable[[str], List[str]],
                 read_image: Callable[[str], ImagePayload],
                 current_generation: Callable[[], int]):
        self._list_images = list_images
        self._read_image = read_image
        self._current_generation = current_generation
        self.slot: Optional[PreloadSlot] = None
        self._task: Optional[asyncio.Task] = None

    def schedule(self, folder: str, index: int, generation: int,
                 images: Optional[List[str]] = None):
        """Start fetching image index of folder in the background.

        images is the known listing for folder; None means list it first.
        """
        self.invalidate()
        self._task = asyncio.create_task(self._fetch(folder, index, generation, images))

    async def _fetch(self, folder: str, index: int, generation: int,
                     images: Optional[List[str]]):
        listed = images is None
        try:
            if listed:
                images = await asyncio.to_thread(self._list_images, folder)
            if not 0 <= index < len(images):
                return
            payload = await asyncio.to_thread(self._read_image, images[index])
        except Exception as e:
            logger.debug(f"Prefetch failed for {folder}[{index}]: {e}")
            return

        if generation != self._current_generation():
            logger.debug(f"Dropping stale prefetch for {folder}[{index}]")
            return

        self.slot = PreloadSlot(
            folder=folder,
            index=index,
            payload=payload,
            generation=generation,
            images=list(images) if listed else None,
        )
        logger.debug(f"Prefetched {images[index]}")

    def take(self, folder: str, index: int, generation: int) -> Optional[PreloadSlot]:
        """Remove the slot and return it if it matches exactly"""
        slot = self.slot
        self.invalidate()
        if slot is None:
            return None
        if slot.folder != folder or slot.index != index or slot.generation != generation:
            logger.debug(f"Prefetch slot {slot.folder}[{slot.index}] does not match {folder}[{index}]")
            return None
        return slot

    def invalidate(self):
        """Clear the slot and cancel any in-flight fetch"""
        self.slot = None
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    async def wait(self):
        """Wait for the in-flight fetch, if any"""
        task = self._task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            if not task.cancelled():
                raise
