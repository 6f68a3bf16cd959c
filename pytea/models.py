"""Data models for Gitea API responses and feature sets."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Optional

from .exceptions import FeatureSetError, GiteaInvalidContentError, GiteaParseError

PLACEHOLDER_NAME = ".gitkeep"
SCRIPTS_FOLDER = "scripts"


class ContentType(Enum):
    """Type of a content entry as reported by the contents endpoint."""

    FILE = "file"
    DIR = "dir"
    SYMLINK = "symlink"
    SUBMODULE = "submodule"

    @classmethod
    def from_api(cls, value: str) -> ContentType:
        """Parse the ``type`` field of a content entry.

        Unknown values are treated as files.
        """
        try:
            return cls(value)
        except ValueError:
            return cls.FILE

    def __str__(self) -> str:
        return self.name.capitalize()


def _required_str(data: dict[str, Any], key: str, what: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value:
        raise GiteaInvalidContentError(f"{what} missing.")
    return value


def _optional_str(data: dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    return value if isinstance(value, str) else None


@dataclass(frozen=True)
class ContentEntry:
    """One file, directory, symlink or submodule in the repository."""

    name: str
    path: str
    content_type: ContentType = ContentType.FILE
    download_url: Optional[str] = None
    sha: Optional[str] = None

    @classmethod
    def from_api_response(cls, data: Any) -> ContentEntry:
        """Create a content entry from one JSON object.

        Args:
            data: Decoded JSON value of a single content object

        Returns:
            ContentEntry instance

        Raises:
            GiteaInvalidContentError: If data is not an object or misses
                ``name``, ``path`` or ``type``
        """
        if not isinstance(data, dict):
            raise GiteaInvalidContentError("A valid content object is needed.")
        name = _required_str(data, "name", "File name")
        path = _required_str(data, "path", "File path")
        content_type = ContentType.from_api(_required_str(data, "type", "Content type"))
        return cls(
            name=name,
            path=path,
            content_type=content_type,
            download_url=_optional_str(data, "download_url"),
            sha=_optional_str(data, "sha"),
        )

    @property
    def is_dir(self) -> bool:
        return self.content_type is ContentType.DIR

    @property
    def is_placeholder(self) -> bool:
        return self.name == PLACEHOLDER_NAME

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "path": self.path,
            "type": self.content_type.value,
            "download_url": self.download_url,
            "sha": self.sha,
        }


@dataclass
class ContentListing:
    """Ordered list of content entries.

    A single object response (a file) becomes a listing with one entry,
    a directory response keeps the order the server returned.
    """

    entries: list[ContentEntry] = field(default_factory=list)

    @classmethod
    def from_api_response(
        cls, data: Any, type_filter: Optional[ContentType] = None
    ) -> ContentListing:
        """Parse a contents endpoint response.

        Args:
            data: Decoded JSON body (array or object)
            type_filter: Keep only entries of this type (applied after parsing)

        Returns:
            ContentListing instance

        Raises:
            GiteaInvalidContentError: If the body is neither array nor object
                or one of the entries is malformed
        """
        if isinstance(data, list):
            entries = [ContentEntry.from_api_response(item) for item in data]
        elif isinstance(data, dict):
            entries = [ContentEntry.from_api_response(data)]
        else:
            raise GiteaInvalidContentError(
                "Only json arrays or objects are valid content responses"
            )

        if type_filter is not None:
            entries = [e for e in entries if e.content_type is type_filter]
        return cls(entries=entries)

    def __iter__(self) -> Iterator[ContentEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def names(self) -> list[str]:
        return [e.name for e in self.entries]

    def paths(self) -> list[str]:
        return [e.path for e in self.entries]

    def to_dict(self) -> dict[str, Any]:
        return {"entries": [e.to_dict() for e in self.entries]}

    def to_table_data(self) -> list[dict[str, Any]]:
        """Rows for ``OutputFormatter.output_table``."""
        return [
            {"name": e.name, "type": str(e.content_type), "path": e.path}
            for e in self.entries
        ]


@dataclass(frozen=True)
class Version:
    """Version of the Gitea instance."""

    version: str

    @classmethod
    def from_api_response(cls, data: Any) -> Version:
        if not isinstance(data, dict) or not isinstance(data.get("version"), str):
            raise GiteaParseError("Version response is missing the version field")
        return cls(version=data["version"])

    def __str__(self) -> str:
        return f"Gitea version: {self.version}"


@dataclass(frozen=True)
class Permission:
    """Permissions of the token owner on the repository."""

    admin: bool = False
    pull: bool = False
    push: bool = False

    @classmethod
    def from_api_response(cls, data: Any) -> Permission:
        if not isinstance(data, dict):
            return cls()
        return cls(
            admin=bool(data.get("admin", False)),
            pull=bool(data.get("pull", False)),
            push=bool(data.get("push", False)),
        )

    def __str__(self) -> str:
        return (
            f"admin[{self.admin}], pull[{self.pull}], push[{self.push}]"
        )


@dataclass(frozen=True)
class User:
    """Owner of a repository."""

    id: int
    login: str
    full_name: str = ""
    email: str = ""
    is_admin: bool = False

    @classmethod
    def from_api_response(cls, data: Any) -> User:
        if not isinstance(data, dict):
            raise GiteaParseError("User object expected")
        return cls(
            id=int(data.get("id", 0)),
            login=str(data.get("login", "")),
            full_name=str(data.get("full_name") or ""),
            email=str(data.get("email") or ""),
            is_admin=bool(data.get("is_admin", False)),
        )


@dataclass(frozen=True)
class Repository:
    """Repository metadata returned by ``GET /repos/{owner}/{repo}``."""

    id: int
    name: str
    full_name: str
    description: str
    default_branch: str
    empty: bool
    updated_at: str
    permissions: Permission
    owner: Optional[User]

    @classmethod
    def from_api_response(cls, data: Any) -> Repository:
        """Create repository metadata from the API response.

        Raises:
            GiteaParseError: If the response is not an object or has no name
        """
        if not isinstance(data, dict) or not isinstance(data.get("name"), str):
            raise GiteaParseError("Repository response is missing the name field")
        owner = data.get("owner")
        return cls(
            id=int(data.get("id", 0)),
            name=data["name"],
            full_name=str(data.get("full_name") or data["name"]),
            description=str(data.get("description") or ""),
            default_branch=str(data.get("default_branch") or ""),
            empty=bool(data.get("empty", False)),
            updated_at=str(data.get("updated_at") or ""),
            permissions=Permission.from_api_response(data.get("permissions")),
            owner=User.from_api_response(owner) if isinstance(owner, dict) else None,
        )

    def to_summary_items(self) -> list[tuple[str, str]]:
        return [
            ("Name", self.name),
            ("Full name", self.full_name),
            ("Description", self.description),
            ("Default branch", self.default_branch),
            ("Empty", str(self.empty)),
            ("Updated at", self.updated_at),
            ("Permissions", str(self.permissions)),
            ("Owner", self.owner.login if self.owner else "-"),
        ]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "full_name": self.full_name,
            "description": self.description,
            "default_branch": self.default_branch,
            "empty": self.empty,
            "updated_at": self.updated_at,
            "permissions": {
                "admin": self.permissions.admin,
                "pull": self.permissions.pull,
                "push": self.permissions.push,
            },
            "owner": self.owner.login if self.owner else None,
        }


@dataclass(frozen=True)
class ApiToken:
    """Access token created through basic auth."""

    id: int
    name: str
    sha1: str
    token_last_eight: str

    @classmethod
    def from_api_response(cls, data: Any) -> ApiToken:
        if not isinstance(data, dict) or not isinstance(data.get("sha1"), str):
            raise GiteaParseError("Token response is missing the sha1 field")
        return cls(
            id=int(data.get("id", 0)),
            name=str(data.get("name", "")),
            sha1=data["sha1"],
            token_last_eight=str(data.get("token_last_eight") or data["sha1"][-8:]),
        )

    def __str__(self) -> str:
        return f"Api Token number {self.id}, name {self.name}: {self.token_last_eight}"


@dataclass(frozen=True)
class FeatureSet:
    """A top-level folder of the repository grouping scripts and configs.

    Script files live below ``<name>/scripts/``, everything else below
    ``<name>/`` is a configuration file.
    """

    name: str

    def __post_init__(self) -> None:
        name = self.name.strip("/")
        if not name or "/" in name or name in (".", ".."):
            raise FeatureSetError(f"Invalid feature set name: {self.name!r}")
        object.__setattr__(self, "name", name)

    @property
    def root(self) -> str:
        return self.name

    @property
    def scripts_root(self) -> str:
        return f"{self.name}/{SCRIPTS_FOLDER}"

    @property
    def placeholders(self) -> tuple[str, str]:
        """Placeholder files that make up an empty feature set."""
        return (
            f"{self.root}/{PLACEHOLDER_NAME}",
            f"{self.scripts_root}/{PLACEHOLDER_NAME}",
        )

    def is_script(self, remote_path: str) -> bool:
        return remote_path.startswith(f"{self.scripts_root}/")

    def relative(self, remote_path: str) -> str:
        """Strip the feature set name, ``demo/etc/x`` becomes ``/etc/x``."""
        if remote_path != self.root and not remote_path.startswith(f"{self.root}/"):
            raise FeatureSetError(
                f"Remote path {remote_path} is not part of feature set {self.name}"
            )
        return remote_path[len(self.root) :]

    def join(self, relative_path: str) -> str:
        return f"{self.root}/{relative_path.lstrip('/')}"

    def __str__(self) -> str:
        return self.name
