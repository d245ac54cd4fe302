"""Byte storage abstraction for generated audio.

Responsibilities:
- Define the named byte-store protocol used by the persistence facade.
- Provide a filesystem-backed store rooted at a directory.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Protocol


class ByteStore(Protocol):
    """Protocol for named byte storage addressed by relative POSIX paths."""

    def put(self, path: str, data: bytes) -> None:
        """Write bytes to a path, replacing existing content."""

    def get(self, path: str) -> bytes:
        """Read bytes stored at a path."""

    def delete(self, path: str) -> bool:
        """Delete a path and return whether it existed."""

    def exists(self, path: str) -> bool:
        """Return whether a path exists."""

    def location(self, path: str) -> str:
        """Return a displayable full location for a stored path."""


class FilesystemByteStore:
    """Filesystem-backed byte store rooted at a directory."""

    def __init__(self, root: Path, name: str = "local") -> None:
        """Initialize the store with a root directory and a display name."""

        self.root = root
        self.name = name

    def resolve(self, path: str) -> Path:
        """Map a store path onto the filesystem, refusing paths outside the root."""

        relative = PurePosixPath(path)
        if relative.is_absolute() or ".." in relative.parts:
            raise ValueError(f"Store path `{path}` must be relative and stay inside the store.")
        return self.root.joinpath(*relative.parts)

    def put(self, path: str, data: bytes) -> None:
        """Write bytes, creating parent directories as needed."""

        target = self.resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)

    def get(self, path: str) -> bytes:
        """Read stored bytes."""

        return self.resolve(path).read_bytes()

    def delete(self, path: str) -> bool:
        """Delete a stored file and report whether it existed."""

        target = self.resolve(path)
        if not target.exists():
            return False
        target.unlink()
        return True

    def exists(self, path: str) -> bool:
        """Return whether the given file exists."""

        return self.resolve(path).exists()

    def location(self, path: str) -> str:
        """Return the absolute filesystem path for a stored file."""

        return str(self.resolve(path).resolve())
