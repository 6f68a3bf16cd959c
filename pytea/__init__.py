"""pytea - CLI tool for managing feature sets of scripts and configs in Gitea."""

from .api import GiteaClient, create_access_token
from .exceptions import (
    FeatureSetError,
    GiteaAPIError,
    GiteaAuthenticationError,
    GiteaConflictError,
    GiteaInvalidContentError,
    GiteaNetworkError,
    GiteaNotFoundError,
    GiteaParseError,
    GiteaPermissionError,
    PyteaConfigError,
    PyteaError,
    PyteaIOError,
    format_failure,
)
from .feature_sets import FeatureSetManager
from .models import ContentEntry, ContentListing, ContentType, FeatureSet
from .paths import to_local_path, to_remote_path

__all__ = [
    "GiteaClient",
    "FeatureSetManager",
    "FeatureSet",
    "ContentEntry",
    "ContentListing",
    "ContentType",
    "FeatureSetError",
    "GiteaAPIError",
    "GiteaAuthenticationError",
    "GiteaConflictError",
    "GiteaInvalidContentError",
    "GiteaNetworkError",
    "GiteaNotFoundError",
    "GiteaParseError",
    "GiteaPermissionError",
    "PyteaConfigError",
    "PyteaError",
    "PyteaIOError",
    "create_access_token",
    "format_failure",
    "to_local_path",
    "to_remote_path",
]
