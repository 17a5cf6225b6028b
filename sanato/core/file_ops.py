"""
Sanato Core: File Operations.

Atomic replacement of small state files (config, credentials). A crash
mid-write leaves either the old file or the new one, never a torn one.
"""
import os
import tempfile
from pathlib import Path
from typing import Union

from sanato.core.errors import StoreIOError


def write_atomic(path: Union[str, Path], data: str, mode: int = 0o600) -> None:
    """Write text to path atomically.

    The data goes to a temp file in the target directory, is fsynced,
    then renamed over the target.

    Args:
        path: Destination file
        data: Text content (UTF-8)
        mode: Permission bits of the new file

    Raises:
        StoreIOError: If any step fails; the target is left untouched
    """
    target = Path(path)
    directory = target.parent if str(target.parent) else Path(".")

    try:
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=f".{target.name}.", suffix=".tmp")
    except OSError as e:
        raise StoreIOError(f"Cannot prepare {target}: {e}")

    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        os.chmod(tmp_path, mode)
        os.replace(tmp_path, target)
    except OSError as e:
        raise StoreIOError(f"Cannot write {target}: {e}")
    finally:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)


def read_text(path: Union[str, Path]) -> str:
    """Read a UTF-8 state file.

    Raises:
        FileNotFoundError: If the file does not exist
        StoreIOError: On any other read failure
    """
    try:
        with open(path, "r", encoding="utf-8") as fh:
            return fh.read()
    except FileNotFoundError:
        raise
    except (OSError, UnicodeDecodeError) as e:
        raise StoreIOError(f"Cannot read {path}: {e}")
