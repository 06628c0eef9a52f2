# traversal.py - PicViewer Traversal Order
"""
Flat (pre-order) and leaf traversal orders derived from a folder tree
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from folder_tree import FolderNode


def flatten(tree: Optional[FolderNode]) -> List[str]:
    """Pre-order list of every folder path, self before children"""
    if tree is None:
        return []
    return [node.path for node in tree.walk()]


def leaves(tree: Optional[FolderNode]) -> List[str]:
    """Pre-order list of the folders that have no subfolders"""
    if tree is None:
        return []
    return [node.path for node in tree.walk() if node.is_leaf]


@dataclass(frozen=True)
class TraversalOrder:
    """Read-only snapshot of both orders for one tree"""
    flat: List[str] = field(default_factory=list)
    leaf: List[str] = field(default_factory=list)
    _flat_index: Dict[str, int] = field(default_factory=dict, repr=False)
    _leaf_index: Dict[str, int] = field(default_factory=dict, repr=False)

    @classmethod
    def from_tree(cls, tree: Optional[FolderNode]) -> "TraversalOrder":
        flat = flatten(tree)
        leaf = leaves(tree)
        return cls(
            flat=flat,
            leaf=leaf,
            _flat_index={path: i for i, path in enumerate(flat)},
            _leaf_index={path: i for i, path in enumerate(leaf)},
        )

    def is_leaf(self, path: str) -> bool:
        return path in self._leaf_index

    def leaf_index(self, path: str) -> Optional[int]:
        """Index of path within the leaf order, None if not a leaf"""
        return self._leaf_index.get(path)

    def next_leaf_after(self, path: str) -> Optional[str]:
        """First leaf that follows path in flat order.

        A path outside the tree scans from the start of the flat order.
        """
        start = self._flat_index.get(path, -1) + 1
        for candidate in self.flat[start:]:
            if candidate in self._leaf_index:
                return candidate
        return None
