"""Helpers shared by the test modules."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional, Union

from foldercompare.core.folder.scanner import DirectoryLister, join_relative
from foldercompare.core.models import Entry, EntryKind


# A tree maps names to file content (str or bytes) or to a nested tree.
Tree = dict[str, Union[str, bytes, dict]]


def make_tree(root: Path, tree: Tree) -> Path:
    """Write a tree to disk under root, byte for byte."""
    root.mkdir(parents=True, exist_ok=True)
    for name, content in tree.items():
        path = root / name
        if isinstance(content, dict):
            make_tree(path, content)
        elif isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_bytes(content.encode('utf-8'))
    return root


class InMemoryLister(DirectoryLister):
    """Directory lister serving trees held in memory; records every call."""

    def __init__(self, trees: dict[str, Tree], on_list: Optional[Callable[[Entry], None]] = None):
        self.trees = {Path(root): tree for root, tree in trees.items()}
        self.on_list = on_list
        self.described: list[Path] = []
        self.listed: list[str] = []

    async def describe(self, path: Path) -> Entry:
        path = Path(path)
        self.described.append(path)
        node = self._lookup(path)
        if not isinstance(node, dict):
            raise NotADirectoryError(f"Not a directory: {path}")
        return Entry(path=path, name=path.name, kind=EntryKind.DIRECTORY, relative_path="")

    async def list_directory(self, directory: Entry) -> list[Entry]:
        self.listed.append(directory.relative_path)
        if self.on_list:
            self.on_list(directory)

        node = self._lookup(directory.path)
        entries = [
            Entry(
                path=directory.path / name,
                name=name,
                kind=EntryKind.DIRECTORY if isinstance(child, dict) else EntryKind.FILE,
                relative_path=join_relative(directory.relative_path, name),
            )
            for name, child in node.items()
        ]
        entries.sort(key=lambda e: (e.is_file, e.name))
        return entries

    def _lookup(self, path: Path):
        for root, tree in self.trees.items():
            if path == root:
                return tree
            if root in path.parents:
                node = tree
                for part in path.relative_to(root).parts:
                    if not isinstance(node, dict) or part not in node:
                        raise FileNotFoundError(2, "No such file or directory", str(path))
                    node = node[part]
                return node
        raise FileNotFoundError(2, "No such file or directory", str(path))
