from __future__ import annotations

import os
from typing import Iterable, List

from buildgate.errors import StructuralError, UnexpectedFilesError


def scan_tree(root: str) -> List[str]:
    """
    Depth-first listing of every regular file under root, in name order.

    Symlinks are not followed. Anything that is neither a directory nor a
    regular file raises StructuralError.
    """
    if not os.path.isdir(root):
        raise StructuralError(root)

    files: List[str] = []

    def walk(dirpath: str) -> None:
        with os.scandir(dirpath) as it:
            entries = sorted(it, key=lambda e: e.name)
        for entry in entries:
            full = os.path.join(dirpath, entry.name)
            if entry.is_dir(follow_symlinks=False):
                walk(full)
            elif entry.is_file(follow_symlinks=False):
                files.append(full)
            else:
                raise StructuralError(full)

    walk(root)
    return files


def find_unexpected(actual: Iterable[str], expected: Iterable[str]) -> List[str]:
    allowed = {os.path.normpath(p) for p in expected}
    return [p for p in actual if os.path.normpath(p) not in allowed]


def check_no_unexpected(actual: Iterable[str], expected: Iterable[str], hint: str) -> None:
    unexpected = find_unexpected(actual, expected)
    if unexpected:
        raise UnexpectedFilesError(unexpected, hint)
