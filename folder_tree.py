# folder_tree.py - PicViewer Folder Tree Builder
"""
Recursive folder tree construction with natural, case-insensitive ordering
"""

import logging
import os
import stat
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from natsort import natsorted

from errors import NotADirectory, StatFailed

logger = logging.getLogger("picviewer.folder_tree")


@dataclass
class FolderNode:
    """One directory in the folder tree"""
    name: str
    path: str
    children: List["FolderNode"] = field(default_factory=list)

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def walk(self) -> Iterator["FolderNode"]:
        """Yield this node and its descendants in pre-order"""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def find(self, path: str) -> Optional["FolderNode"]:
        """Find node by path"""
        for node in self.walk():
            if node.path == path:
                return node
        return None

    def count(self) -> int:
        """Total number of nodes including this one"""
        return sum(1 for _ in self.walk())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        data: Dict[str, Any] = {"name": self.name, "path": self.path}
        if self.children:
            data["children"] = [child.to_dict() for child in self.children]
        return data


def sort_children(children: List[FolderNode]) -> List[FolderNode]:
    """Sort folder nodes by natural, case-insensitive name order"""
    return natsorted(children, key=lambda node: node.name.lower())


def build_folder_tree(root_path: str) -> FolderNode:
    """Build the folder tree rooted at root_path.

    Raises NotADirectory or StatFailed for problems with the root itself.
    Unreadable subdirectories are logged and left out of the tree.
    """
    root = Path(os.path.abspath(root_path))

    try:
        root_stat = root.stat()
    except OSError as e:
        raise StatFailed(f"failed to stat base path '{root_path}': {e}", str(root)) from e

    if not stat.S_ISDIR(root_stat.st_mode):
        raise NotADirectory(f"'{root_path}' is not a directory", str(root))

    try:
        node = _build_node(root)
    except OSError as e:
        raise StatFailed(f"failed to read base path '{root_path}': {e}", str(root)) from e

    logger.debug(f"Folder tree built for {root}: {node.count()} folders")
    return node


def _build_node(directory: Path) -> FolderNode:
    """Build one node, recursing into visible subdirectories"""
    node = FolderNode(name=directory.name or str(directory), path=str(directory))

    children = []
    with os.scandir(directory) as entries:
        for entry in entries:
            if entry.name.startswith("."):
                continue
            try:
                if not entry.is_dir(follow_symlinks=False):
                    continue
            except OSError:
                continue

            child_path = directory / entry.name
            try:
                children.append(_build_node(child_path))
            except OSError as e:
                logger.error(f"Error processing subdirectory {child_path}: {e}")

    node.children = sort_children(children)
    return node


if __name__ == "__main__":
    import json
    import sys

    tree = build_folder_tree(sys.argv[1] if len(sys.argv) > 1 else ".")
    print(json.dumps(tree.to_dict(), indent=2))
    print(f"{tree.count()} folders")
