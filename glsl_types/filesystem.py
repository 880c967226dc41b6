"""Local file system access for the generator and the CLI."""

import os
from pathlib import Path

from glsl_types.generator.models import SHADER_EXTENSIONS


class LocalFileSystem:
    """File access backed by the local disk."""

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def read_text(self, path: str) -> str:
        # newline="" keeps the original line endings in embedded sources
        with open(path, encoding=self.encoding, newline="") as f:
            return f.read()

    def exists(self, path: str) -> bool:
        return os.path.isfile(path)

    def canonicalize(self, path: str) -> str:
        return str(Path(path).resolve())

    def write_text(self, path: str, contents: str) -> bool:
        """Write a file, creating parent directories as needed.

        Args:
            path: Destination path
            contents: Text to write verbatim

        Returns:
            False if the file already had these contents and was left alone
        """
        target = Path(path)
        if target.is_file() and self.read_text(path) == contents:
            return False
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "w", encoding=self.encoding, newline="") as f:
            f.write(contents)
        return True


def is_shader_file(path: str | os.PathLike) -> bool:
    return Path(path).suffix.lower() in SHADER_EXTENSIONS


def find_shaders(input_root: str | os.PathLike) -> list[Path]:
    """All shader files below `input_root`, sorted for a stable order."""
    root = Path(input_root)
    if not root.is_dir():
        return []
    return sorted(p for p in root.rglob("*") if p.is_file() and is_shader_file(p))
