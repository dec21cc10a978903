"""
GitHub contents API implementation of the DocumentStore port.

The blob sha returned by the contents API is the revision token:
a PUT only succeeds when it carries the sha of the current file.
"""
import base64
import binascii
import logging
import time
from typing import Any, Dict, Optional

import requests
from asgiref.sync import sync_to_async

from access_keys.ports.document_store import (
    DocumentStore,
    StoreConflictError,
    StoreNotConfiguredError,
    StoreUnavailableError,
    VersionedDocument,
)
from core.metrics import store_request_duration_seconds

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"


class GitHubContentsStore(DocumentStore):
    """
    Document store backed by a file in a GitHub repository.

    Blocking HTTP calls are made with requests and run in a worker
    thread so handlers can await them.
    """

    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        branch: Optional[str] = None,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the store.

        Args:
            token: GitHub token with contents read/write permission
            owner: Repository owner
            repo: Repository name
            branch: Optional branch, defaults to the repository default branch
            api_url: API base URL (GitHub Enterprise uses a different host)
            timeout: Per-request timeout in seconds
            session: Optional requests session
        """
        missing = [
            name
            for name, value in (("token", token), ("owner", owner), ("repo", repo))
            if not value
        ]
        if missing:
            raise StoreNotConfiguredError(
                f"GitHub store is not configured (missing: {', '.join(missing)})"
            )
        self.owner = owner
        self.repo = repo
        self.branch = branch or None
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"token {token}",
                "Accept": "application/vnd.github.v3+json",
                "User-Agent": "access-key-service",
            }
        )

    def _url(self, path: str) -> str:
        return f"{self.api_url}/repos/{self.owner}/{self.repo}/contents/{path.lstrip('/')}"

    async def fetch(self, path: str) -> Optional[VersionedDocument]:
        """Fetch the document and its blob sha."""
        return await sync_to_async(self._fetch_sync, thread_sensitive=False)(path)

    async def replace(
        self,
        path: str,
        content: str,
        revision: Optional[str],
        message: str,
    ) -> str:
        """Write the document, guarded by the blob sha."""
        return await sync_to_async(self._replace_sync, thread_sensitive=False)(
            path, content, revision, message
        )

    def _fetch_sync(self, path: str) -> Optional[VersionedDocument]:
        params = {"ref": self.branch} if self.branch else None
        response = self._request("GET", self._url(path), params=params)

        if response.status_code == 404:
            logger.info("Key document %s not found in %s/%s", path, self.owner, self.repo)
            return None
        if not response.ok:
            raise StoreUnavailableError(
                f"GitHub API error: {response.status_code} - {response.text[:200]}"
            )

        payload = self._json(response)
        if not isinstance(payload, dict) or "sha" not in payload:
            raise StoreUnavailableError(f"GitHub path {path} is not a file")

        revision = payload["sha"]
        if payload.get("encoding", "base64") != "base64":
            # Files over 1 MB are listed without inline content
            logger.info(
                "Key document %s has no inline content (%s bytes), reading blob %s",
                path,
                payload.get("size"),
                revision[:8],
            )
            payload = self._fetch_blob(revision)

        try:
            content = base64.b64decode(payload.get("content") or "").decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise StoreUnavailableError(f"Could not decode GitHub file {path}: {e}") from e

        logger.debug("Fetched %s at revision %s", path, revision[:8])
        return VersionedDocument(content=content, revision=revision)

    def _fetch_blob(self, sha: str) -> Dict[str, Any]:
        """Read a blob by sha. Serves files the contents API will not inline."""
        url = f"{self.api_url}/repos/{self.owner}/{self.repo}/git/blobs/{sha}"
        response = self._request("GET", url)
        if not response.ok:
            raise StoreUnavailableError(
                f"GitHub API error reading blob {sha[:8]}: "
                f"{response.status_code} - {response.text[:200]}"
            )

        payload = self._json(response)
        if not isinstance(payload, dict) or payload.get("encoding") != "base64":
            raise StoreUnavailableError(f"GitHub blob {sha[:8]} has no base64 content")
        return payload

    def _replace_sync(
        self,
        path: str,
        content: str,
        revision: Optional[str],
        message: str,
    ) -> str:
        body: Dict[str, Any] = {
            "message": message,
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
        }
        if revision:
            body["sha"] = revision
        if self.branch:
            body["branch"] = self.branch

        response = self._request("PUT", self._url(path), json=body)

        if response.status_code == 409 or (
            response.status_code == 422 and "sha" in response.text
        ):
            logger.warning(
                "Revision conflict writing %s (expected %s): %s",
                path,
                (revision or "none")[:8],
                response.status_code,
            )
            raise StoreConflictError(
                f"Key document {path} changed since revision {(revision or 'none')[:8]}"
            )
        if not response.ok:
            raise StoreUnavailableError(
                f"Failed to update GitHub file: {response.status_code} - {response.text[:200]}"
            )

        payload = self._json(response)
        try:
            new_revision = payload["content"]["sha"]
        except (KeyError, TypeError) as e:
            raise StoreUnavailableError("GitHub response did not include the new sha") from e

        logger.info("Wrote %s: %s (revision %s)", path, message, new_revision[:8])
        return new_revision

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        start_time = time.time()
        try:
            return self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.error("GitHub %s %s failed: %s", method, url, e)
            raise StoreUnavailableError(f"GitHub request failed: {e}") from e
        finally:
            store_request_duration_seconds.labels(method=method).observe(
                time.time() - start_time
            )

    @staticmethod
    def _json(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise StoreUnavailableError("GitHub returned a non-JSON response") from e
