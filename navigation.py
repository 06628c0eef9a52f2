# navigation.py - PicViewer Navigation Controller
"""
Navigation state machine over a folder tree.

Owns the current position (folder, image listing, index), the one-slot
last-visited history, the prefetch slot and the slideshow scheduler. All
moves are coroutines serialized through one asyncio.Lock, so two moves never
interleave across their I/O suspension points.
"""

import asyncio
import functools
import logging
import random
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from display import ViewerDisplay
from errors import DecodeFailed, ListFailed, NotADirectory, ReadFailed, StatFailed
from folder_tree import FolderNode, build_folder_tree
import image_source
from image_source import ImagePayload
from prefetch import PrefetchCache
from slideshow import SlideshowScheduler
from traversal import TraversalOrder


@dataclass
class Position:
    """Current folder, its images and the index being shown (-1 when empty)"""
    folder: str = ""
    images: List[str] = field(default_factory=list)
    index: int = -1

    @classmethod
    def for_folder(cls, folder: str, images: List[str], index: int = 0) -> "Position":
        """Position in folder at index, or -1 if there are no images"""
        return cls(folder=folder, images=list(images), index=index if images else -1)

    @property
    def current_image(self) -> Optional[str]:
        if 0 <= self.index < len(self.images):
            return self.images[self.index]
        return None


class NavigationController:
    """Moves a position cursor through the leaf order of a folder tree"""

    def __init__(self,
                 display: Optional[ViewerDisplay] = None,
                 list_images: Optional[Callable[[str], List[str]]] = None,
                 read_image: Optional[Callable[[str], ImagePayload]] = None,
                 build_tree: Callable[[str], FolderNode] = build_folder_tree,
                 rng: Optional[random.Random] = None,
                 prefetch_enabled: bool = True,
                 output_format: str = "PNG",
                 slideshow_mode: str = "sequence",
                 slideshow_delay: int = 3000):
        self.logger = logging.getLogger("picviewer.navigation")
        self.display = display or ViewerDisplay()

        self._list_images = list_images or image_source.list_images
        self._read_image = read_image or functools.partial(image_source.read_image, output_format=output_format)
        self._build_tree = build_tree
        self.rng = rng or random.Random()

        # Tree state, replaced wholesale on every load
        self.tree: Optional[FolderNode] = None
        self.order = TraversalOrder()

        # Navigation state
        self.position = Position()
        self.last_visited: Optional[str] = None
        self.generation = 0

        self.prefetch_enabled = prefetch_enabled
        self.prefetch = PrefetchCache(
            list_images=self._list_images,
            read_image=self._read_image,
            current_generation=lambda: self.generation,
        )
        self.slideshow = SlideshowScheduler(self, mode=slideshow_mode, delay_ms=slideshow_delay)

        self._lock = asyncio.Lock()

    @property
    def root(self) -> Optional[str]:
        return self.tree.path if self.tree else None

    # ------------------------------------------------------------------
    # Tree loading
    # ------------------------------------------------------------------

    async def load_root(self, root_path: str) -> FolderNode:
        """Build the tree for root_path and show its root folder.

        Root failures are shown on the display and re-raised; the image
        currently on screen is left alone.
        """
        async with self._lock:
            tree = await self._build(root_path)

            self.slideshow.stop()
            self.prefetch.invalidate()
            self._replace_tree(tree)
            self.last_visited = None
            self._set_position(Position())

            self.logger.info(f"Loaded folder tree {tree.path}: {len(self.order.flat)} folders, "
                             f"{len(self.order.leaf)} leaf folders")
            self.display.show_tree(tree)

            await self._select_folder_locked(tree.path)
            return tree

    async def reload_tree(self) -> Optional[FolderNode]:
        """Rebuild the tree from the current root, staying in the current folder if it survived"""
        if self.tree is None:
            return None

        async with self._lock:
            tree = await self._build(self.tree.path)

            self.prefetch.invalidate()
            self._replace_tree(tree)
            self.display.show_tree(tree)

            if self.last_visited and tree.find(self.last_visited) is None:
                self.last_visited = None

            if tree.find(self.position.folder) is None:
                self.logger.info(f"Folder {self.position.folder} no longer exists, returning to root")
                self._set_position(Position())
                await self._select_folder_locked(tree.path)
            else:
                # Leaf order may have changed under the current position
                self._set_position(Position(self.position.folder, self.position.images, self.position.index))
                self._schedule_prefetch()
            return tree

    async def _build(self, root_path: str) -> FolderNode:
        try:
            return await asyncio.to_thread(self._build_tree, root_path)
        except (NotADirectory, StatFailed) as e:
            self.logger.error(f"Failed to load folder tree {root_path}: {e}")
            self.display.show_tree_error(str(e))
            raise

    def _replace_tree(self, tree: FolderNode):
        self.tree = tree
        self.order = TraversalOrder.from_tree(tree)

    # ------------------------------------------------------------------
    # Explicit navigation
    # ------------------------------------------------------------------

    async def select_folder(self, path: str) -> bool:
        """Show the first image of folder path (tree click)"""
        async with self._lock:
            return await self._select_folder_locked(path)

    async def _select_folder_locked(self, path: str) -> bool:
        if path == self.position.folder:
            self.logger.debug(f"Already in {path}")
            return False

        if self.position.folder:
            self.last_visited = self.position.folder

        self.prefetch.invalidate()
        images, reason = await self._list_folder(path)
        self._set_position(Position.for_folder(path, images))
        self.logger.debug(f"Selected folder {path} ({len(images)} images)")

        await self._display_current(reason=reason)
        return True

    async def go_to_next_leaf_folder(self) -> bool:
        """Jump to the next leaf folder, stopping at the last one"""
        async with self._lock:
            leaf = self.order.leaf
            if not leaf:
                return False

            index = self.order.leaf_index(self.position.folder)
            if index is None:
                target = leaf[0]
            elif index + 1 < len(leaf):
                target = leaf[index + 1]
            else:
                self.logger.debug("Already at last leaf folder")
                return False

            return await self._select_folder_locked(target)

    async def go_to_prev_leaf_folder(self) -> bool:
        """Jump to the previous leaf folder, stopping at the first one"""
        async with self._lock:
            leaf = self.order.leaf
            if not leaf:
                return False

            index = self.order.leaf_index(self.position.folder)
            if index is None:
                target = leaf[-1]
            elif index > 0:
                target = leaf[index - 1]
            else:
                self.logger.debug("Already at first leaf folder")
                return False

            return await self._select_folder_locked(target)

    async def go_to_random_leaf_folder(self) -> bool:
        """Jump to a random leaf folder other than the current one"""
        async with self._lock:
            leaf = self.order.leaf
            if not leaf:
                return False

            if len(leaf) == 1:
                target = leaf[0]
            else:
                target = self.rng.choice(leaf)
                while target == self.position.folder:
                    target = self.rng.choice(leaf)

            return await self._select_folder_locked(target)

    async def go_to_last_visited_folder(self) -> bool:
        """Swap back to the folder shown before the last explicit move"""
        async with self._lock:
            if not self.last_visited:
                return False
            return await self._select_folder_locked(self.last_visited)

    # ------------------------------------------------------------------
    # Image stepping
    # ------------------------------------------------------------------

    async def next_image(self) -> bool:
        """Advance one image, crossing into the next leaf folder at the end.

        At the last image of the last leaf folder this is a no-op that also
        stops an active slideshow.
        """
        async with self._lock:
            target = self._next_target()
            if target is None:
                self.prefetch.invalidate()
                self.logger.info("End of last leaf folder reached")
                if self.slideshow.active:
                    self.slideshow.stop()
                return False

            folder, index = target
            slot = self.prefetch.take(folder, index, self.generation)

            if folder == self.position.folder:
                self._set_position(Position(folder, self.position.images, index))
                await self._display_current(payload=slot.payload if slot else None)
                return True

            if slot is not None and slot.images is not None:
                images, reason = slot.images, None
            else:
                slot = None
                images, reason = await self._list_folder(folder)

            self._set_position(Position.for_folder(folder, images))
            self.logger.debug(f"Crossed into {folder}")
            await self._display_current(payload=slot.payload if slot else None, reason=reason)
            return True

    async def prev_image(self) -> bool:
        """Step back one image, wrapping to the last image of the same folder"""
        async with self._lock:
            self.prefetch.invalidate()

            position = self.position
            if not position.images:
                return False

            index = position.index - 1
            if index < 0:
                index = len(position.images) - 1

            self._set_position(Position(position.folder, position.images, index))
            await self._display_current()
            return True

    async def show_random_image_in_folder(self) -> bool:
        """Show a random image of the current folder, avoiding the current one"""
        async with self._lock:
            self.prefetch.invalidate()

            position = self.position
            count = len(position.images)
            if count == 0:
                return False

            index = self.rng.randrange(count)
            if count > 1:
                while index == position.index:
                    index = self.rng.randrange(count)

            self._set_position(Position(position.folder, position.images, index))
            await self._display_current()
            return True

    async def show_random_image_anywhere(self) -> bool:
        """Show a random image of a random leaf folder.

        An unreadable or empty folder counts as a miss and changes nothing.
        """
        async with self._lock:
            self.prefetch.invalidate()

            if not self.order.leaf:
                return False

            folder = self.rng.choice(self.order.leaf)
            try:
                images = await asyncio.to_thread(self._list_images, folder)
            except ListFailed as e:
                self.logger.warning(f"Random pick missed {folder}: {e}")
                return False

            if not images:
                self.logger.debug(f"Random pick missed empty folder {folder}")
                return False

            index = self.rng.randrange(len(images))
            self._set_position(Position(folder, list(images), index))
            await self._display_current()
            return True

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _set_position(self, position: Position):
        self.position = position
        self.generation += 1

    def _next_target(self) -> Optional[Tuple[str, int]]:
        """(folder, index) the next sequential advance would show, None at the end"""
        position = self.position
        if position.images and position.index + 1 < len(position.images):
            return position.folder, position.index + 1

        folder = self.order.next_leaf_after(position.folder)
        if folder is None:
            return None
        return folder, 0

    async def _list_folder(self, folder: str) -> Tuple[List[str], Optional[str]]:
        """List images of folder; a failure yields an empty listing and the reason"""
        try:
            return await asyncio.to_thread(self._list_images, folder), None
        except ListFailed as e:
            self.logger.error(f"Error listing images in {folder}: {e}")
            return [], str(e)

    async def _display_current(self, payload: Optional[ImagePayload] = None,
                               reason: Optional[str] = None) -> bool:
        position = self.position
        image_path = position.current_image
        if image_path is None:
            self.display.show_no_image(position, reason)
            return False

        if payload is None:
            try:
                payload = await asyncio.to_thread(self._read_image, image_path)
            except (ReadFailed, DecodeFailed) as e:
                self.logger.warning(f"Error reading image {image_path}: {e}")
                self.display.show_no_image(position, str(e))
                return False
        else:
            self.logger.debug(f"Using prefetched image {image_path}")

        self.display.show_image(position, payload)
        self._schedule_prefetch()
        return True

    def _schedule_prefetch(self):
        if not self.prefetch_enabled or not self.slideshow.prefetch_allowed:
            return

        target = self._next_target()
        if target is None:
            return

        folder, index = target
        images = self.position.images if folder == self.position.folder else None
        self.prefetch.schedule(folder, index, self.generation, images)

    def get_navigation_info(self) -> Dict[str, Any]:
        """Snapshot of the navigation state"""
        leaf_index = self.order.leaf_index(self.position.folder)
        return {
            "root": self.root,
            "folder": self.position.folder,
            "image": self.position.current_image,
            "index": self.position.index,
            "image_count": len(self.position.images),
            "leaf_index": leaf_index,
            "leaf_count": len(self.order.leaf),
            "folder_count": len(self.order.flat),
            "last_visited": self.last_visited,
            "prefetched": self.prefetch.slot is not None,
            "slideshow": self.slideshow.get_status(),
        }

    async def close(self):
        """Stop the slideshow timer and any background prefetch"""
        self.slideshow.stop()
        self.prefetch.invalidate()
        self.logger.debug("Navigation controller closed")
