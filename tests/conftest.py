"""Fixtures and configuration for pytest."""

import errno
import posixpath
from pathlib import Path

import pytest

INPUT_ROOT = "/project/shaders"
OUTPUT_ROOT = "/project/output"


class MemoryFileSystem:
    """In-memory FileSystem with POSIX paths, for tests that need no disk."""

    def __init__(self, files: dict[str, str] | None = None, root: str = INPUT_ROOT):
        self.root = root
        self.files: dict[str, str] = {}
        self.reads: list[str] = []
        for path, text in (files or {}).items():
            self.add(path, text)

    def add(self, path: str, text: str) -> str:
        """Add a file; relative paths are placed below the root."""
        canonical = self.canonicalize(posixpath.join(self.root, path))
        self.files[canonical] = text
        return canonical

    def read_text(self, path: str) -> str:
        canonical = self.canonicalize(path)
        self.reads.append(canonical)
        if canonical not in self.files:
            raise FileNotFoundError(errno.ENOENT, "No such file or directory", path)
        return self.files[canonical]

    def exists(self, path: str) -> bool:
        return self.canonicalize(path) in self.files

    def canonicalize(self, path: str) -> str:
        return posixpath.normpath(posixpath.join("/", path))


@pytest.fixture
def memory_fs() -> MemoryFileSystem:
    """Empty in-memory file system rooted at INPUT_ROOT."""
    return MemoryFileSystem()


@pytest.fixture
def shader_tree(tmp_path: Path):
    """Factory writing a dict of relative paths to a shader folder on disk."""

    def write(files: dict[str, str]) -> Path:
        root = tmp_path / "shaders"
        for name, text in files.items():
            path = root / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text)
        root.mkdir(exist_ok=True)
        return root

    return write
