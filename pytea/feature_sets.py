"""Feature set operations on top of the Gitea contents API."""

import logging
from pathlib import Path
from typing import Any, Optional, Union

from .api import GiteaClient
from .config import DEFAULT_SCRIPT_FOLDER
from .exceptions import FeatureSetError
from .models import (
    ContentEntry,
    ContentListing,
    ContentType,
    FeatureSet,
    Repository,
    Version,
)
from .paths import rebase_on_root, relative_to_root, to_local_path, to_remote_path
from .walker import ensure_writable_dir, read_file, read_folder, write_file

logger = logging.getLogger(__name__)


class FeatureSetManager:
    """Pushes, pulls, renames and deletes feature sets of one repository.

    Every operation starts from a fresh listing of the remote repository.
    Multi-step operations are not atomic: when a request fails the operation
    stops and the already applied steps stay in place. Running the same
    command again after fixing the cause converges to the intended state.
    """

    def __init__(
        self,
        client: GiteaClient,
        author: str,
        email: str,
        script_dir: Union[str, Path] = DEFAULT_SCRIPT_FOLDER,
        root: Union[str, Path] = "/",
    ):
        """Initialize the feature set manager.

        Args:
            client: Gitea API client for the repository
            author: Commit author name
            email: Commit author email
            script_dir: Local folder for script files
            root: Local folder that corresponds to the root of a feature set
                for configuration files (default: /)
        """
        self.client = client
        self.author = author
        self.email = email
        self.script_dir = Path(script_dir)
        self.root = Path(root).resolve()

    def close(self) -> None:
        """Close the underlying API client."""
        self.client.close()

    def __enter__(self) -> "FeatureSetManager":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # =========================
    # Queries
    # =========================

    def info(self) -> tuple[Version, Repository]:
        """Return the server version and the repository metadata."""
        return self.client.get_server_version(), self.client.get_repository_info()

    def list_feature_sets(self) -> ContentListing:
        """List the folders in the repository root, i.e. the feature sets."""
        return self.client.list_path("", ContentType.DIR)

    def list_feature_set(self, name: str) -> ContentListing:
        """List all files of a feature set without placeholders."""
        return self.client.list_folder_recursive(FeatureSet(name).root)

    def exists(self, name: str) -> bool:
        """Check whether a folder ``name`` exists in the repository root."""
        feature_set = FeatureSet(name)
        return any(e.name == feature_set.name for e in self.list_feature_sets())

    def _require(self, name: str) -> FeatureSet:
        feature_set = FeatureSet(name)
        if not self.exists(feature_set.name):
            raise FeatureSetError(f"No feature set named {feature_set.name}")
        return feature_set

    # =========================
    # Create / delete
    # =========================

    def new_feature_set(self, name: str, message: Optional[str] = None) -> bool:
        """Create an empty feature set.

        Git does not track empty folders, so the feature set and its scripts
        folder each get a placeholder file.

        Returns:
            True if the feature set was created, False if it already existed
        """
        feature_set = FeatureSet(name)
        if self.exists(feature_set.name):
            logger.info("Feature set %s already exists", feature_set)
            return False

        for placeholder in feature_set.placeholders:
            directory, file_name = placeholder.rsplit("/", 1)
            self.client.create_or_update_file(
                directory, file_name, b"", self.author, self.email, message
            )
        logger.info("Created feature set %s", feature_set)
        return True

    def delete(
        self,
        name: str,
        sub_path: Optional[str] = None,
        is_script: bool = False,
        recursive: bool = False,
        message: Optional[str] = None,
    ) -> list[str]:
        """Delete a feature set or a part of it.

        Args:
            name: Feature set name
            sub_path: Script file name (with ``is_script``) or configuration
                path inside the feature set. Without it the whole feature set
                is deleted recursively.
            is_script: Whether ``sub_path`` names a script file
            recursive: Descend into folders below ``sub_path``
            message: Commit message

        Returns:
            Deleted remote paths
        """
        feature_set = FeatureSet(name)
        if sub_path is None:
            target, recursive = feature_set.root, True
        elif is_script:
            target = f"{feature_set.scripts_root}/{sub_path.strip('/')}"
            recursive = False
        else:
            target = feature_set.join(sub_path)

        deleted = self.client.delete_tree(
            target, recursive, self.author, self.email, message
        )
        for path in deleted:
            logger.info("Deleted %s", path)
        return deleted

    # =========================
    # Push
    # =========================

    def _push_files(
        self,
        feature_set: FeatureSet,
        path: Path,
        is_script: bool,
        message: Optional[str],
    ) -> list[str]:
        pushed = []
        for file in read_folder(path):
            if is_script:
                remote_path = to_remote_path(file, True)
            else:
                remote_path = to_remote_path(relative_to_root(file, self.root), False)
            self.client.create_or_update_file(
                feature_set.root,
                remote_path,
                read_file(file),
                self.author,
                self.email,
                message,
            )
            logger.info("Pushed file %s into feature set %s", remote_path, feature_set)
            pushed.append(feature_set.join(remote_path))
        return pushed

    def push(
        self,
        name: str,
        sub_path: Optional[Union[str, Path]] = None,
        is_script: bool = False,
        message: Optional[str] = None,
    ) -> list[str]:
        """Upload local files into a feature set.

        With ``sub_path`` the local file or folder is uploaded (folders
        recursively). Without it every remote file of the feature set that
        has a local counterpart is uploaded again; remote files without a
        local file are skipped.

        Returns:
            Remote paths that were written

        Raises:
            FeatureSetError: If the feature set or the local path is missing
        """
        feature_set = self._require(name)

        if sub_path is not None:
            path = Path(sub_path).expanduser()
            if not path.exists():
                raise FeatureSetError(f"File {path} doesn't exist")
            return self._push_files(feature_set, path.resolve(), is_script, message)

        pushed = []
        for entry in self.client.list_folder_recursive(feature_set.root):
            script = feature_set.is_script(entry.path)
            local_path = self._local_path(entry, script)
            if not local_path.exists():
                logger.debug("No local file for %s, skipping", entry.path)
                continue
            pushed.extend(self._push_files(feature_set, local_path, script, message))
        return pushed

    # =========================
    # Pull
    # =========================

    def _local_path(self, entry: ContentEntry, is_script: bool) -> Path:
        local_path = to_local_path(entry.path, is_script, self.script_dir)
        if is_script:
            return local_path
        return rebase_on_root(local_path, self.root)

    def _pull_file(self, entry: ContentEntry, is_script: bool) -> Path:
        content = self.client.download_raw(entry.path)
        local_path = self._local_path(entry, is_script)
        if not is_script:
            ensure_writable_dir(local_path.parent)
        write_file(local_path, content, executable=is_script)
        logger.info("Pulled file %s", local_path)
        return local_path

    def pull(
        self,
        name: str,
        sub_path: Optional[str] = None,
        is_script: bool = False,
        is_config: bool = False,
    ) -> list[Path]:
        """Download the files of a feature set.

        ``is_script`` restricts the pull to script files, ``is_config`` to
        configuration files; with both set only scripts are pulled. ``sub_path``
        keeps files whose remote path ends with it. This is a plain suffix
        match, ``test`` matches ``a/test`` as well as ``b/test``.

        Existing local files are overwritten, script files are made
        executable for owner and group.

        Returns:
            Local files that were written
        """
        feature_set = self._require(name)
        ensure_writable_dir(self.script_dir)

        entries = list(self.client.list_folder_recursive(feature_set.root))
        if is_script:
            entries = [e for e in entries if feature_set.is_script(e.path)]
        elif is_config:
            entries = [e for e in entries if not feature_set.is_script(e.path)]
        if sub_path:
            entries = [e for e in entries if e.path.endswith(sub_path)]

        return [self._pull_file(e, feature_set.is_script(e.path)) for e in entries]

    # =========================
    # Rename
    # =========================

    def rename(
        self,
        name: str,
        new_name: str,
        path: Optional[str] = None,
        message: Optional[str] = None,
    ) -> list[str]:
        """Rename a feature set by copying all files and deleting the old one.

        The copy is not transactional. If it stops halfway both feature sets
        exist; running the rename again finishes it because existing files in
        the new feature set are updated in place.

        Returns:
            Remote paths written below the new name

        Raises:
            FeatureSetError: If ``path`` is given, the names are equal or the
                feature set does not exist
        """
        if path is not None:
            raise FeatureSetError(
                "Renaming files or folders inside a feature set is not supported"
            )
        source = self._require(name)
        target = FeatureSet(new_name)
        if source == target:
            raise FeatureSetError(f"Feature set {source} can not be renamed to itself")

        files = self.client.list_folder_recursive(source.root)
        self.new_feature_set(target.name, message)

        copied = []
        for entry in files:
            content = self.client.download_raw(entry.path)
            relative = source.relative(entry.path)
            self.client.create_or_update_file(
                target.root, relative, content, self.author, self.email, message
            )
            copied.append(target.join(relative))
            logger.info("Copied %s to %s", entry.path, copied[-1])

        self.delete(source.name, None, False, True, message)
        return copied
