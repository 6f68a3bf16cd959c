"""Local filesystem helpers for pushing and pulling feature sets."""

import logging
import os
from pathlib import Path

from .exceptions import FeatureSetError, PyteaIOError

logger = logging.getLogger(__name__)

VCS_DIR_NAME = ".git"
SCRIPT_FILE_MODE = 0o750


def read_folder(path: Path) -> list[Path]:
    """Recursively collect the files below a path.

    Folders named ``.git`` are skipped and every folder is read once, so
    symlinks pointing back to a parent folder end the descent. A path
    pointing to a file yields that file only.

    Args:
        path: File or folder to scan

    Returns:
        Resolved paths of all files, in directory order

    Raises:
        PyteaIOError: If the path does not exist or can not be read
    """
    try:
        path = path.resolve(strict=True)
        if not path.is_dir():
            return [path]
        return _read_dir(path, set())
    except OSError as e:
        raise PyteaIOError(f"Failed to read {path}: {e}") from e


def _read_dir(path: Path, seen: set[Path]) -> list[Path]:
    seen.add(path)
    files: list[Path] = []
    for item in sorted(path.iterdir()):
        if item.is_dir():
            if item.name == VCS_DIR_NAME:
                logger.debug("Skipping version control folder: %s", item)
                continue
            target = item.resolve()
            if target in seen:
                logger.debug("Skipping already visited folder: %s", item)
                continue
            files.extend(_read_dir(target, seen))
        else:
            files.append(item.resolve())
    return files


def read_file(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        raise PyteaIOError(f"Failed to read file {path}: {e}") from e


def write_file(path: Path, content: bytes, executable: bool = False) -> None:
    """Write ``content`` to ``path``, replacing an existing file.

    Script files get :data:`SCRIPT_FILE_MODE`.
    """
    try:
        path.write_bytes(content)
        if executable:
            path.chmod(SCRIPT_FILE_MODE)
    except OSError as e:
        raise PyteaIOError(f"Failed to write file {path}: {e}") from e


def ensure_writable_dir(path: Path) -> None:
    """Create ``path`` if needed and check that it is writable.

    Raises:
        FeatureSetError: If the folder is not writable for the current user
        PyteaIOError: If the folder can not be created
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise PyteaIOError(f"Failed to create folder {path}: {e}") from e
    if not os.access(path, os.W_OK):
        raise FeatureSetError(f"Path {path} not writable. Do you need to be root?")
