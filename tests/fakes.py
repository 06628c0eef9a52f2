"""In-memory folder library and recording display for controller tests."""

from __future__ import annotations

import posixpath

from display import ViewerDisplay
from errors import ListFailed, NotADirectory, ReadFailed
from folder_tree import FolderNode, sort_children
from image_source import ImagePayload


class FakeLibrary:
    """Folder tree plus image listings keyed by folder path.

    ``folders`` maps every folder path to the image names it holds; the
    first key that is a prefix of all others is the root.
    """

    def __init__(self, folders: dict[str, list[str]]) -> None:
        self.folders = folders
        self.failing_lists: set[str] = set()
        self.failing_reads: set[str] = set()
        self.list_calls: list[str] = []
        self.read_calls: list[str] = []

    def build_tree(self, root_path: str) -> FolderNode:
        if root_path not in self.folders:
            raise NotADirectory(f"'{root_path}' is not a directory", root_path)

        nodes = {
            path: FolderNode(name=posixpath.basename(path) or path, path=path)
            for path in self.folders
            if path == root_path or path.startswith(root_path.rstrip("/") + "/")
        }
        for path, node in nodes.items():
            parent = posixpath.dirname(path)
            if path != root_path and parent in nodes:
                nodes[parent].children.append(node)
        for node in nodes.values():
            node.children = sort_children(node.children)
        return nodes[root_path]

    def list_images(self, folder: str) -> list[str]:
        self.list_calls.append(folder)
        if folder in self.failing_lists or folder not in self.folders:
            raise ListFailed(f"failed to list images in {folder}", folder)
        return sorted(posixpath.join(folder, name) for name in self.folders[folder])

    def read_image(self, path: str) -> ImagePayload:
        self.read_calls.append(path)
        if path in self.failing_reads:
            raise ReadFailed(f"failed to open file {path}", path)
        return ImagePayload(mime_type="image/png", data=path.encode("utf-8"))


class RecordingDisplay(ViewerDisplay):
    """Display sink that remembers what it was asked to show."""

    def __init__(self) -> None:
        super().__init__()
        self.shown: list[tuple[str, int, str]] = []
        self.payloads: list[ImagePayload] = []
        self.no_image: list[tuple[str, str | None]] = []
        self.tree_errors: list[str] = []
        self.trees: list[FolderNode] = []
        self.slideshow_states: list[bool] = []

    def show_tree(self, tree: FolderNode) -> None:
        super().show_tree(tree)
        self.trees.append(tree)

    def show_tree_error(self, message: str) -> None:
        super().show_tree_error(message)
        self.tree_errors.append(message)

    def show_image(self, position, payload: ImagePayload) -> None:
        self.shown.append((position.folder, position.index, position.current_image))
        self.payloads.append(payload)

    def show_no_image(self, position, reason: str | None = None) -> None:
        self.no_image.append((position.folder, reason))

    def slideshow_changed(self, active: bool) -> None:
        self.slideshow_states.append(active)


SAMPLE_FOLDERS = {
    "/pics": [],
    "/pics/2024-01": ["b.jpg", "a.jpg"],
    "/pics/2024-02": ["c.jpg"],
    "/pics/2024-03": [],
    "/pics/2024-03/day1": ["d.jpg", "e.jpg", "f.jpg"],
    "/pics/2024-03/day2": [],
}
