"""
Safe file writing utilities.

Writes go to a temporary file in the target directory which is then
atomically moved over the final name, so readers never see partial files.
"""

from __future__ import annotations

import contextlib
import os
import tempfile
from pathlib import Path


def atomic_write_text(file_path: Path, text: str, encoding: str = "utf-8") -> Path:
    """Atomically write text to a file.

    Parent directories are created as needed.

    Args:
        file_path: Destination path
        text: Content to write
        encoding: Text encoding

    Returns:
        The destination path

    Raises:
        OSError: If the file cannot be written
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_path = tempfile.mkstemp(
        dir=file_path.parent, suffix=".tmp", prefix=".folio_"
    )
    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, file_path)
    except Exception:
        with contextlib.suppress(OSError):
            os.unlink(tmp_path)
        raise

    return file_path


def remove_file(file_path: Path) -> bool:
    """Remove a file if it exists.

    Returns:
        True if a file was removed
    """
    try:
        Path(file_path).unlink()
    except FileNotFoundError:
        return False
    return True
