# errors.py - PicViewer Error Types
"""
Error hierarchy for folder traversal, image listing/reading and dialogs
"""

from typing import Optional


class PicViewerError(Exception):
    """Base class for all PicViewer errors"""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class NotADirectory(PicViewerError):
    """Root path exists but is not a directory"""


class StatFailed(PicViewerError):
    """Root path could not be stat'ed or read"""


class ListFailed(PicViewerError):
    """Directory listing for images failed"""


class ReadFailed(PicViewerError):
    """Image file could not be read"""


class DecodeFailed(PicViewerError):
    """Image data could not be decoded or re-encoded"""


class DialogFailed(PicViewerError):
    """Folder selection dialog could not be shown"""


class DialogCancelled(PicViewerError):
    """User closed the folder selection dialog without choosing"""
