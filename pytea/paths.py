"""Translation between local paths and paths inside a feature set.

Script files are flattened: only the file name matters locally and remotely
they all live in the ``scripts`` folder of a feature set. Configuration files
keep their path, the feature set name takes the place of the filesystem root.
"""

from pathlib import Path, PurePath, PurePosixPath
from typing import Union

from .exceptions import FeatureSetError
from .models import SCRIPTS_FOLDER

PathLike = Union[str, PurePath]


def to_remote_path(local_path: PathLike, is_script: bool) -> str:
    """Convert a local path into a path relative to the feature set.

    Args:
        local_path: Local file path. For configuration files it must already
            be relative to the configuration root.
        is_script: Whether the file is a script file

    Returns:
        ``/scripts/<file name>`` for scripts, the unchanged path otherwise

    Raises:
        FeatureSetError: If a script path has no file name

    Examples:
        >>> to_remote_path("/home/ops/bin/deploy.sh", True)
        '/scripts/deploy.sh'
        >>> to_remote_path("/etc/nginx/nginx.conf", False)
        '/etc/nginx/nginx.conf'
    """
    path = PurePath(local_path)
    if not is_script:
        return path.as_posix()
    if not path.name:
        raise FeatureSetError(f"{path} is not a valid path to a file.")
    return f"/{SCRIPTS_FOLDER}/{path.name}"


def to_local_path(remote_path: str, is_script: bool, script_dir: PathLike) -> Path:
    """Convert a remote repository path into a local path.

    Args:
        remote_path: Path from the repository root, e.g. ``demo/etc/app.conf``
        is_script: Whether the file is a script file
        script_dir: Local folder for script files

    Returns:
        ``<script_dir>/<file name>`` for scripts, otherwise the remote path
        without its feature set name as absolute path (``/etc/app.conf``)

    Raises:
        FeatureSetError: If the remote path contains no ``/``
    """
    if "/" not in remote_path:
        raise FeatureSetError(
            f"Remote path {remote_path} can not be converted to a local one."
        )
    if is_script:
        _, name = remote_path.rsplit("/", 1)
        return Path(script_dir) / name
    _, rest = remote_path.split("/", 1)
    return Path(f"/{rest}")


def relative_to_root(local_path: PathLike, root: PathLike) -> PurePosixPath:
    """Express a local path as absolute path below ``root``.

    With the default root ``/`` this is the path itself.

    Raises:
        FeatureSetError: If the path is not located below ``root``
    """
    try:
        relative = Path(local_path).relative_to(Path(root))
    except ValueError as e:
        raise FeatureSetError(f"{local_path} is not located below {root}") from e
    return PurePosixPath("/") / relative.as_posix()


def rebase_on_root(local_path: PathLike, root: PathLike) -> Path:
    """Move an absolute local path below ``root``, inverse of relative_to_root."""
    path = PurePosixPath(PurePath(local_path).as_posix())
    return Path(root).joinpath(*path.parts[1:]) if path.is_absolute() else Path(root) / path
