"""Configuration file handling for pytea."""

import logging
import os
import tomllib
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

import tomli_w

from .exceptions import PyteaConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONF_NAME = ".pytea.toml"
CONFIG_ENV_VAR = "PYTEA_CONFIG"
TOKEN_ENV_VAR = "PYTEA_API_TOKEN"
DEFAULT_SCRIPT_FOLDER = "/usr/local/bin"


def get_default_path() -> Path:
    """Return the configuration path.

    ``PYTEA_CONFIG`` wins over ``~/.pytea.toml``.

    Raises:
        PyteaConfigError: If the home directory can not be determined
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    try:
        return Path.home() / DEFAULT_CONF_NAME
    except RuntimeError as e:
        raise PyteaConfigError("Could not find home directory") from e


@dataclass
class RemoteRepository:
    """Connection and commit author settings for the remote repository."""

    url: str
    api_token: str
    repository: str
    owner: str
    author: str = ""
    email: str = ""

    @property
    def masked_token(self) -> str:
        if len(self.api_token) <= 8:
            return "*" * len(self.api_token)
        return "*" * 8 + self.api_token[-8:]


@dataclass
class Configuration:
    """Contents of the pytea configuration file."""

    repo: RemoteRepository
    script_folder: str = DEFAULT_SCRIPT_FOLDER
    root_folder: str = "/"
    path: Optional[Path] = field(default=None, compare=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: Optional[Path] = None) -> "Configuration":
        """Build a configuration from parsed TOML.

        Raises:
            PyteaConfigError: If the repo table or one of its keys is missing
        """
        repo = data.get("repo")
        if not isinstance(repo, dict):
            raise PyteaConfigError("Missing [repo] table in configuration")
        missing = [
            key
            for key in ("url", "api_token", "repository", "owner")
            if not isinstance(repo.get(key), str)
        ]
        if missing:
            raise PyteaConfigError(
                f"Missing configuration keys in [repo]: {', '.join(missing)}"
            )
        return cls(
            repo=RemoteRepository(
                url=repo["url"],
                api_token=repo["api_token"],
                repository=repo["repository"],
                owner=repo["owner"],
                author=str(repo.get("author") or repo["owner"]),
                email=str(repo.get("email") or ""),
            ),
            script_folder=str(data.get("script_folder") or DEFAULT_SCRIPT_FOLDER),
            root_folder=str(data.get("root_folder") or "/"),
            path=path,
        )

    @classmethod
    def read(cls, path: Optional[Union[str, Path]] = None) -> "Configuration":
        """Read the configuration file.

        Args:
            path: Configuration file (default: see get_default_path)

        Returns:
            Configuration instance; ``PYTEA_API_TOKEN`` replaces the stored token

        Raises:
            PyteaConfigError: If the file is missing or malformed
        """
        config_path = Path(path).expanduser() if path else get_default_path()
        try:
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
        except OSError as e:
            raise PyteaConfigError(
                f"Failed to read configuration {config_path}"
            ) from e
        except tomllib.TOMLDecodeError as e:
            raise PyteaConfigError(
                f"Failed to parse configuration {config_path}"
            ) from e

        conf = cls.from_dict(data, path=config_path)
        env_token = os.environ.get(TOKEN_ENV_VAR)
        if env_token:
            logger.debug("Using api token from %s", TOKEN_ENV_VAR)
            conf.repo.api_token = env_token
        return conf

    def to_dict(self) -> dict[str, Any]:
        return {
            "script_folder": self.script_folder,
            "root_folder": self.root_folder,
            "repo": asdict(self.repo),
        }

    def write(self, path: Optional[Union[str, Path]] = None) -> Path:
        """Write the configuration as TOML, readable by the owner only.

        Returns:
            The path written to
        """
        config_path = Path(path).expanduser() if path else (self.path or get_default_path())
        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(config_path, "wb") as f:
                tomli_w.dump(self.to_dict(), f)
            config_path.chmod(0o600)
        except OSError as e:
            raise PyteaConfigError(
                f"Failed to write configuration {config_path}"
            ) from e
        self.path = config_path
        logger.info("Configuration written to %s", config_path)
        return config_path

    def to_summary_items(self) -> list[tuple[str, str]]:
        """Rows for printing the configuration, the token is masked."""
        return [
            ("Config file", str(self.path) if self.path else "-"),
            ("script_folder", self.script_folder),
            ("root_folder", self.root_folder),
            ("url", self.repo.url),
            ("api_token", self.repo.masked_token),
            ("repository", self.repo.repository),
            ("owner", self.repo.owner),
            ("author", self.repo.author),
            ("email", self.repo.email),
        ]
