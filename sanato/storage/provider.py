#!/usr/bin/env python3
"""Storage capability for Sanato modules.

StorageProvider validates the data and temp roots at startup and then
exposes a narrow set of operations on paths relative to the data root:
- resolve: map a client path to a real path without escaping the root
- stat / list_dir: metadata
- open_read / write_stream: content (writes are staged in the temp root)
- make_dir / remove: namespace changes

The provider keeps no mutable state, so concurrent use across disjoint
paths needs no locking. Concurrent writers to one path are last-wins.

Example:
    >>> storage = StorageProvider("/srv/data", "/srv/tmp")
    >>> storage.write_stream("notes/todo.txt", [b"milk"])
    >>> [e.name for e in storage.list_dir("notes")]
    ['todo.txt']
"""

import os
import shutil
import stat
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterable, List, Union

from sanato.core.constants import ErrorCode, FileKind, Limits
from sanato.core.errors import ProviderInitError, StorageError


@dataclass(frozen=True)
class EntryInfo:
    """Metadata of one storage entry."""

    name: str
    path: str
    kind: FileKind
    size: int
    modified: float

    @property
    def is_dir(self) -> bool:
        return self.kind is FileKind.DIRECTORY

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "path": self.path,
            "type": self.kind.value,
            "size": self.size,
            "modified": self.modified,
        }


def _check_root(path: Path, label: str) -> Path:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ProviderInitError(f"Cannot create {label} {path}: {e}")

    if not path.is_dir():
        raise ProviderInitError(f"{label.capitalize()} is not a directory: {path}")
    if not os.access(path, os.R_OK | os.W_OK | os.X_OK):
        raise ProviderInitError(
            f"{label.capitalize()} is not readable and writable: {path}",
            ErrorCode.PERMISSION_DENIED,
        )
    return path.resolve()


class StorageProvider:
    """Validated data/temp roots plus file operations beneath the data root."""

    def __init__(self, root_data_dir: Union[str, Path], root_temp_dir: Union[str, Path]):
        """Initialize storage provider.

        Missing roots are created.

        Args:
            root_data_dir: Directory holding user data
            root_temp_dir: Directory for staging uploads

        Raises:
            ProviderInitError: If a root cannot be created or is not a
                readable, writable directory
        """
        self.root_data_dir = _check_root(Path(root_data_dir), "data root")
        self.root_temp_dir = _check_root(Path(root_temp_dir), "temp root")

    def resolve(self, path: str) -> Path:
        """Map a client path to a real path under the data root.

        Args:
            path: Slash-separated path relative to the data root

        Returns:
            Absolute path

        Raises:
            StorageError: If the path escapes the data root or is too long
        """
        if len(path) > Limits.MAX_PATH_LENGTH:
            raise StorageError(f"Path too long: {len(path)} characters", ErrorCode.INVALID_INPUT)
        if "\x00" in path:
            raise StorageError("Path contains a NUL byte", ErrorCode.INVALID_INPUT)

        relative = path.strip("/")
        candidate = (self.root_data_dir / relative).resolve()
        if candidate != self.root_data_dir and self.root_data_dir not in candidate.parents:
            raise StorageError(f"Path escapes data root: {path}", ErrorCode.PERMISSION_DENIED)
        return candidate

    def _relative(self, real: Path) -> str:
        rel = real.relative_to(self.root_data_dir).as_posix()
        return "/" if rel == "." else "/" + rel

    def _info(self, real: Path) -> EntryInfo:
        st = real.stat()
        kind = FileKind.DIRECTORY if stat.S_ISDIR(st.st_mode) else FileKind.FILE
        return EntryInfo(
            name=real.name,
            path=self._relative(real),
            kind=kind,
            size=st.st_size if kind is FileKind.FILE else 0,
            modified=st.st_mtime,
        )

    def stat(self, path: str) -> EntryInfo:
        """Return metadata for a path.

        Raises:
            StorageError: NOT_FOUND if the path does not exist
        """
        real = self.resolve(path)
        try:
            return self._info(real)
        except FileNotFoundError:
            raise StorageError(f"Not found: {path}", ErrorCode.NOT_FOUND)
        except OSError as e:
            raise StorageError(f"Cannot stat {path}: {e}")

    def list_dir(self, path: str) -> List[EntryInfo]:
        """List a directory, sorted by name.

        Raises:
            StorageError: NOT_FOUND if missing, INVALID_INPUT if not a directory
        """
        real = self.resolve(path)
        if not real.exists():
            raise StorageError(f"Not found: {path}", ErrorCode.NOT_FOUND)
        if not real.is_dir():
            raise StorageError(f"Not a directory: {path}", ErrorCode.INVALID_INPUT)
        try:
            return [self._info(child) for child in sorted(real.iterdir(), key=lambda p: p.name)]
        except OSError as e:
            raise StorageError(f"Cannot list {path}: {e}")

    def open_read(self, path: str) -> BinaryIO:
        """Open a file for reading. The caller closes it.

        Raises:
            StorageError: NOT_FOUND if missing, INVALID_INPUT if a directory
        """
        real = self.resolve(path)
        if real.is_dir():
            raise StorageError(f"Is a directory: {path}", ErrorCode.INVALID_INPUT)
        try:
            return open(real, "rb")
        except FileNotFoundError:
            raise StorageError(f"Not found: {path}", ErrorCode.NOT_FOUND)
        except OSError as e:
            raise StorageError(f"Cannot open {path}: {e}")

    def write_stream(self, path: str, chunks: Iterable[bytes]) -> EntryInfo:
        """Write a file from a stream of chunks.

        Content is staged in the temp root and moved into place once
        complete, so readers never observe a partial file.

        Returns:
            Metadata of the written file

        Raises:
            StorageError: If the parent directory is missing, the target is
                a directory, or writing fails
        """
        real = self.resolve(path)
        if real == self.root_data_dir or real.is_dir():
            raise StorageError(f"Is a directory: {path}", ErrorCode.CONFLICT)
        if not real.parent.is_dir():
            raise StorageError(f"Parent directory missing: {path}", ErrorCode.NOT_FOUND)

        fd, staged = tempfile.mkstemp(dir=self.root_temp_dir, prefix="upload-")
        try:
            with os.fdopen(fd, "wb") as fh:
                for chunk in chunks:
                    fh.write(chunk)
            # temp and data roots may live on different filesystems
            shutil.move(staged, real)
        except OSError as e:
            raise StorageError(f"Cannot write {path}: {e}")
        finally:
            if os.path.exists(staged):
                os.unlink(staged)
        return self._info(real)

    def make_dir(self, path: str) -> EntryInfo:
        """Create a directory.

        Raises:
            StorageError: CONFLICT if it exists, NOT_FOUND if the parent is missing
        """
        real = self.resolve(path)
        try:
            real.mkdir()
        except FileExistsError:
            raise StorageError(f"Already exists: {path}", ErrorCode.CONFLICT)
        except FileNotFoundError:
            raise StorageError(f"Parent directory missing: {path}", ErrorCode.NOT_FOUND)
        except OSError as e:
            raise StorageError(f"Cannot create {path}: {e}")
        return self._info(real)

    def remove(self, path: str) -> None:
        """Remove a file or a directory tree.

        Raises:
            StorageError: NOT_FOUND if missing, PERMISSION_DENIED for the root
        """
        real = self.resolve(path)
        if real == self.root_data_dir:
            raise StorageError("Refusing to remove the data root", ErrorCode.PERMISSION_DENIED)
        try:
            if real.is_dir() and not real.is_symlink():
                shutil.rmtree(real)
            else:
                real.unlink()
        except FileNotFoundError:
            raise StorageError(f"Not found: {path}", ErrorCode.NOT_FOUND)
        except OSError as e:
            raise StorageError(f"Cannot remove {path}: {e}")
