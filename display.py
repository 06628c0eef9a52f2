# display.py - PicViewer Display Sink
"""
Presentation boundary for the navigation core. The controller reports what
should be on screen; a real front end renders it, the default sink logs it.
"""

import logging
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from folder_tree import FolderNode
    from image_source import ImagePayload
    from navigation import Position


class ViewerDisplay:
    """Receives display updates from the NavigationController"""

    def __init__(self):
        self.logger = logging.getLogger("picviewer.display")
        self.tree_error: Optional[str] = None

    def show_tree(self, tree: "FolderNode"):
        """New folder tree loaded"""
        self.tree_error = None
        self.logger.info(f"📁 Folder tree: {tree.path} ({tree.count()} folders)")

    def show_tree_error(self, message: str):
        """Root load failed; the current image stays on screen"""
        self.tree_error = message
        self.logger.error(f"Folder tree error: {message}")

    def show_image(self, position: "Position", payload: "ImagePayload"):
        """Image at position is ready"""
        self.logger.info(
            f"🖼️  {position.current_image} ({position.index + 1}/{len(position.images)}) "
            f"[{payload.mime_type}, {len(payload)} bytes]"
        )

    def show_no_image(self, position: "Position", reason: Optional[str] = None):
        """Nothing to show for position"""
        if reason:
            self.logger.warning(f"No image in {position.folder or '-'}: {reason}")
        else:
            self.logger.info(f"No image in {position.folder or '-'}")

    def slideshow_changed(self, active: bool):
        """Slideshow started or stopped"""
        self.logger.info(f"Slideshow {'started' if active else 'stopped'}")
