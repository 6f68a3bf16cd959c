"""Exceptions raised by pytea."""

from typing import Iterator


class PyteaError(Exception):
    """Base exception for all pytea errors."""


class GiteaAPIError(PyteaError):
    """A request against the Gitea API failed."""


class GiteaAuthenticationError(GiteaAPIError):
    """The API token or the basic auth credentials were rejected (401)."""


class GiteaPermissionError(GiteaAPIError):
    """The user may not access the requested resource (403)."""


class GiteaNotFoundError(GiteaAPIError):
    """The requested repository, file or folder does not exist (404)."""


class GiteaConflictError(GiteaAPIError):
    """The write conflicts with the remote state (409/422).

    Raised for stale content hashes and for files that already exist.
    """


class GiteaNetworkError(GiteaAPIError):
    """The server could not be reached."""


class GiteaParseError(GiteaAPIError):
    """The response body is not valid JSON or has an unexpected shape."""


class GiteaInvalidContentError(GiteaParseError):
    """A content response is missing required fields."""


class FeatureSetError(PyteaError):
    """A local precondition of a feature set operation is not met."""


class PyteaIOError(PyteaError):
    """Reading or writing a local file failed."""


class PyteaConfigError(PyteaError):
    """The configuration file is missing, unreadable or malformed."""


def iter_causes(error: BaseException) -> Iterator[BaseException]:
    """Yield ``error`` followed by every exception in its ``__cause__`` chain."""
    seen: set[int] = set()
    current: BaseException | None = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__


def format_failure(action: str, error: BaseException) -> str:
    """Render a failed action together with its cause chain.

    Args:
        action: What failed, e.g. "Failed to push feature set demo"
        error: The exception that ended the action

    Returns:
        A string like ``"Failed to X. Cause: outer. Cause: inner"``
    """
    causes = [str(e) or type(e).__name__ for e in iter_causes(error)]
    return ". Cause: ".join([action, *causes])
