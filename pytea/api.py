"""API client for the Gitea contents API."""

from __future__ import annotations

import base64
import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from .exceptions import (
    GiteaAPIError,
    GiteaAuthenticationError,
    GiteaConflictError,
    GiteaInvalidContentError,
    GiteaNetworkError,
    GiteaNotFoundError,
    GiteaParseError,
    GiteaPermissionError,
)
from .models import (
    ApiToken,
    ContentEntry,
    ContentListing,
    ContentType,
    Repository,
    Version,
)

logger = logging.getLogger(__name__)

API_PART = "/api/v1"
USER_AGENT = "pytea"
DEFAULT_TOKEN_NAME = "pytea"


def _raise_for_status(response: httpx.Response) -> None:
    """Translate an unsuccessful response into a pytea exception.

    Args:
        response: The response to check

    Raises:
        GiteaAPIError: Or one of its subclasses for well-known status codes
    """
    if response.is_success:
        return

    status_code = response.status_code
    error_msg = f"API request failed with status {status_code}"

    # Gitea puts a human readable reason into "message"
    try:
        if response.content:
            error_data = response.json()
            if isinstance(error_data, dict):
                msg = error_data.get("message") or error_data.get("error")
                if msg:
                    error_msg = f"{error_msg}: {msg}"
    except ValueError:
        pass

    if status_code == 401:
        raise GiteaAuthenticationError(f"Invalid API token or credentials ({error_msg})")
    elif status_code == 403:
        raise GiteaPermissionError(f"Access forbidden - check your permissions ({error_msg})")
    elif status_code == 404:
        raise GiteaNotFoundError(f"Resource not found: {response.request.url.path}")
    elif status_code in (409, 422):
        raise GiteaConflictError(error_msg)
    raise GiteaAPIError(error_msg)


def _decode_json(response: httpx.Response) -> Any:
    content_type = response.headers.get("Content-Type", "")
    if not response.content:
        return {}
    if "json" not in content_type:
        raise GiteaParseError(f"Unexpected response type: {content_type}")
    try:
        return response.json()
    except ValueError as e:
        raise GiteaParseError("Invalid JSON response from server") from e


def create_access_token(
    url: str,
    username: str,
    password: str,
    token_name: str = DEFAULT_TOKEN_NAME,
    timeout: float = 30.0,
    transport: Optional[httpx.BaseTransport] = None,
) -> ApiToken:
    """Create a new API token using basic authentication.

    Args:
        url: Base URL of the Gitea instance
        username: Login name of the user
        password: Password of the user
        token_name: Name of the new token
        timeout: Request timeout in seconds
        transport: Optional httpx transport (used by tests)

    Returns:
        The created token, ``sha1`` holds the secret

    Raises:
        GiteaAPIError: If the token could not be created
    """
    endpoint = f"{url.rstrip('/')}{API_PART}/users/{quote(username, safe='')}/tokens"
    logger.info("Requesting new api token %s for %s", token_name, username)
    try:
        with httpx.Client(
            auth=(username, password),
            headers={"User-Agent": USER_AGENT},
            timeout=httpx.Timeout(timeout),
            transport=transport,
        ) as client:
            response = client.post(endpoint, json={"name": token_name})
    except httpx.RequestError as e:
        raise GiteaNetworkError(f"Network error: {e}") from e
    _raise_for_status(response)
    return ApiToken.from_api_response(_decode_json(response))


class GiteaClient:
    """Client for the contents API of one Gitea repository.

    Calls are blocking and issued one at a time. There are no retries,
    a failed request aborts the calling operation.
    """

    def __init__(
        self,
        url: str,
        api_token: str,
        owner: str,
        repository: str,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """Initialize the Gitea API client.

        Args:
            url: Base URL of the Gitea instance, e.g. https://git.example.com
            api_token: Access token sent with every request
            owner: Owner (user or organization) of the repository
            repository: Repository name
            timeout: Request timeout in seconds (default: 30.0)
            transport: Optional httpx transport (used by tests)
        """
        self.url = url.rstrip("/")
        self.api_url = f"{self.url}{API_PART}"
        self.api_token = api_token
        self.owner = owner
        self.repository = repository
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.Client | None = None

    def _get_client(self) -> httpx.Client:
        """Get or create the httpx client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(
                headers={
                    "Authorization": f"token {self.api_token}",
                    "User-Agent": USER_AGENT,
                },
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    def close(self) -> None:
        """Close the client and release connections."""
        if self._client is not None and not self._client.is_closed:
            self._client.close()
            self._client = None

    def __enter__(self) -> GiteaClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _send(self, method: str, endpoint: str, **kwargs: Any) -> httpx.Response:
        url = f"{self.api_url}/{endpoint.lstrip('/')}"
        logger.debug("Request: %s %s", method, url)
        try:
            response = self._get_client().request(method, url, **kwargs)
        except httpx.RequestError as e:
            raise GiteaNetworkError(f"Network error: {e}") from e
        logger.debug("Response: %s %s (status=%d)", method, endpoint, response.status_code)
        _raise_for_status(response)
        return response

    def _request(self, method: str, endpoint: str, **kwargs: Any) -> Any:
        """Make an API request and decode the JSON body.

        Args:
            method: HTTP method
            endpoint: API endpoint path below /api/v1
            **kwargs: Additional arguments passed to httpx

        Returns:
            Response JSON data ({} for an empty body)

        Raises:
            GiteaAPIError: If the request fails
            GiteaParseError: If the body is not JSON
        """
        return _decode_json(self._send(method, endpoint, **kwargs))

    def _repo_endpoint(self, kind: str, path: str = "") -> str:
        endpoint = f"/repos/{self.owner}/{self.repository}/{kind}"
        path = quote(path.strip("/"), safe="/")
        return f"{endpoint}/{path}" if path else endpoint

    @staticmethod
    def _join(directory: str, name: str) -> str:
        directory = directory.rstrip("/")
        name = name.lstrip("/")
        return f"{directory}/{name}" if directory else name

    @staticmethod
    def _commit_body(
        author: str,
        email: str,
        message: Optional[str],
        **fields: Any,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {"author": {"name": author, "email": email}}
        body.update(fields)
        if message:
            body["message"] = message
        return body

    # =========================
    # Instance information
    # =========================

    def get_server_version(self) -> Version:
        """Return the version of the Gitea instance."""
        return Version.from_api_response(self._request("GET", "/version"))

    def get_repository_info(self) -> Repository:
        """Return metadata of the configured repository."""
        return Repository.from_api_response(
            self._request("GET", f"/repos/{self.owner}/{self.repository}")
        )

    # =========================
    # Listing
    # =========================

    def list_path(
        self, path: str = "", type_filter: Optional[ContentType] = None
    ) -> ContentListing:
        """List a file or a folder of the repository.

        Args:
            path: Path from the repository root ("" for the root)
            type_filter: Keep only entries of this type

        Returns:
            Listing with one entry for a file or the folder's children

        Raises:
            GiteaNotFoundError: If the path does not exist
            GiteaInvalidContentError: If the response is malformed
        """
        data = self._request("GET", self._repo_endpoint("contents", path))
        return ContentListing.from_api_response(data, type_filter)

    def get_single_file(self, path: str) -> ContentEntry:
        """Return the file entry for ``path``.

        The last file entry of the listing is returned without checking that
        its path equals ``path``. Don't use this for folders.

        Raises:
            GiteaInvalidContentError: If no file entry was returned
        """
        listing = self.list_path(path, ContentType.FILE)
        if listing.is_empty:
            raise GiteaInvalidContentError(
                f"No valid response for the request of file {path}"
            )
        return listing.entries[-1]

    def list_folder_recursive(self, path: str) -> ContentListing:
        """List every file below ``path``.

        Directories are descended with one request each. Placeholder files
        are left out, symlinks and submodules are returned as they are.
        """
        files: list[ContentEntry] = []
        for entry in self.list_path(path):
            if entry.content_type is ContentType.DIR:
                logger.debug("Recursing into directory: %s", entry.path)
                files.extend(self.list_folder_recursive(entry.path))
            elif not entry.is_placeholder:
                files.append(entry)
        return ContentListing(entries=files)

    def file_exists(self, path: str) -> Optional[ContentEntry]:
        """Return the file entry if a file exists exactly at ``path``."""
        try:
            entry = self.get_single_file(path)
        except (GiteaNotFoundError, GiteaInvalidContentError):
            return None
        return entry if entry.path == path.strip("/") else None

    # =========================
    # Writing
    # =========================

    def create_file(
        self,
        directory: str,
        name: str,
        content: bytes,
        author: str,
        email: str,
        message: Optional[str] = None,
    ) -> Any:
        """Create a new file ``directory/name``.

        Returns:
            The decoded response body
        """
        path = self._join(directory, name)
        body = self._commit_body(
            author, email, message, content=base64.b64encode(content).decode("ascii")
        )
        logger.debug("Creating file %s (%d bytes)", path, len(content))
        return self._request("POST", self._repo_endpoint("contents", path), json=body)

    def update_file(
        self,
        directory: str,
        name: str,
        content: bytes,
        sha: str,
        author: str,
        email: str,
        message: Optional[str] = None,
    ) -> Any:
        """Replace the content of ``directory/name``.

        Args:
            sha: Content hash of the version being replaced

        Raises:
            GiteaConflictError: If ``sha`` is stale
        """
        path = self._join(directory, name)
        body = self._commit_body(
            author,
            email,
            message,
            content=base64.b64encode(content).decode("ascii"),
            sha=sha,
        )
        logger.debug("Updating file %s (%d bytes)", path, len(content))
        return self._request("PUT", self._repo_endpoint("contents", path), json=body)

    def create_or_update_file(
        self,
        directory: str,
        name: str,
        content: bytes,
        author: str,
        email: str,
        message: Optional[str] = None,
    ) -> Any:
        """Create ``directory/name`` or update it if it already exists.

        The existence check and the write are two requests. A file created
        by someone else in between makes the create request fail.
        """
        path = self._join(directory, name)
        existing = self.file_exists(path)
        if existing is None:
            return self.create_file(directory, name, content, author, email, message)
        if existing.sha is None:
            raise GiteaInvalidContentError(f"Content hash missing for {path}")
        return self.update_file(
            directory, name, content, existing.sha, author, email, message
        )

    def delete_file(
        self,
        path: str,
        sha: str,
        author: str,
        email: str,
        message: Optional[str] = None,
    ) -> Any:
        """Delete the file at ``path``.

        Args:
            sha: Content hash of the file
        """
        body = self._commit_body(author, email, message, sha=sha)
        logger.debug("Deleting file %s", path)
        return self._request(
            "DELETE", self._repo_endpoint("contents", path), json=body
        )

    def delete_tree(
        self,
        path: str,
        recursive: bool,
        author: str,
        email: str,
        message: Optional[str] = None,
    ) -> list[str]:
        """Delete a file or the entries of a folder.

        Subfolders are descended when ``recursive`` is set. Otherwise the
        delete request is sent for the subfolder entry itself.

        Returns:
            Paths of the deleted entries
        """
        deleted: list[str] = []
        for entry in self.list_path(path):
            if entry.content_type is ContentType.DIR and recursive:
                deleted.extend(
                    self.delete_tree(entry.path, True, author, email, message)
                )
                continue
            if entry.sha is None:
                raise GiteaInvalidContentError(f"Content hash missing for {entry.path}")
            self.delete_file(entry.path, entry.sha, author, email, message)
            deleted.append(entry.path)
        return deleted

    # =========================
    # Download
    # =========================

    def download_raw(self, path: str) -> bytes:
        """Download the raw content of a file.

        Returns:
            File content as bytes
        """
        entry = self.get_single_file(path)
        response = self._send("GET", self._repo_endpoint("raw", entry.path))
        return response.content
