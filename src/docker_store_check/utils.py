"""
Filesystem access used by the store checker.
"""

import os
import shutil
from typing import List


class LocalFileSystem:
    """Thin wrapper over the local filesystem so the checker can run against fakes."""

    def list_dir(self, path: str) -> List[str]:
        """List entry names of a directory, an absent directory lists as empty."""
        try:
            return sorted(os.listdir(path))
        except FileNotFoundError:
            return []

    def read_file(self, path: str) -> str:
        # undecodable bytes survive as surrogates so byte_length() stays exact
        with open(path, 'r', encoding='utf-8', newline='', errors='surrogateescape') as f:
            return f.read()

    def exists(self, path: str) -> bool:
        """Check existence; errors other than "not found" propagate."""
        try:
            os.stat(path)
        except FileNotFoundError:
            return False
        return True

    def remove_all(self, path: str) -> None:
        """Remove a path and everything below it. A missing path is not an error."""
        if not os.path.lexists(path):
            return
        if os.path.isdir(path) and not os.path.islink(path):
            shutil.rmtree(path)
        else:
            os.remove(path)


def byte_length(s: str) -> int:
    """Size in bytes of file content returned by read_file."""
    return len(s.encode('utf-8', errors='surrogateescape'))
