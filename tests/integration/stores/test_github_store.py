"""
Integration tests for GitHubContentsStore against a mocked requests session.
"""
import base64
import json
from datetime import timedelta
from unittest.mock import MagicMock, Mock

import pytest
import requests

from access_keys.application.commands.generate_key import GenerateKeyCommand
from access_keys.application.handlers.generate_key_handler import GenerateKeyHandler
from access_keys.infrastructure.repositories.document_key_repository import (
    DocumentKeyRepository,
)
from access_keys.infrastructure.stores.github_store import GitHubContentsStore
from access_keys.ports.document_store import (
    StoreConflictError,
    StoreNotConfiguredError,
    StoreUnavailableError,
)

FILE_URL = "https://api.github.com/repos/acme/key-store/contents/keys.json"
BLOB_URL = "https://api.github.com/repos/acme/key-store/git/blobs/bigsha"


def _encoded(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def _response(status_code=200, json_body=None, text=""):
    """Build a fake requests.Response."""
    response = Mock(spec=requests.Response)
    response.status_code = status_code
    response.ok = status_code < 400
    response.text = text or ("" if json_body is None else str(json_body))
    if json_body is None:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = json_body
    return response


@pytest.fixture
def session():
    """Fixture for a mocked requests session."""
    mock_session = MagicMock(spec=requests.Session)
    mock_session.headers = {}
    return mock_session


@pytest.fixture
def github_store(session):
    """Fixture for GitHubContentsStore over the mocked session."""
    return GitHubContentsStore(
        token="secret-token", owner="acme", repo="key-store", session=session
    )


@pytest.mark.integration
class TestGitHubStoreConfiguration:
    """Tests for store construction."""

    def test_missing_configuration(self):
        """Test missing credentials are reported by name."""
        with pytest.raises(StoreNotConfiguredError, match="token, repo"):
            GitHubContentsStore(token="", owner="acme", repo=None)

    def test_session_headers(self, github_store, session):
        """Test the token and API version headers are set on the session."""
        assert session.headers["Authorization"] == "token secret-token"
        assert session.headers["Accept"] == "application/vnd.github.v3+json"


@pytest.mark.asyncio
@pytest.mark.integration
class TestGitHubStoreFetch:
    """Tests for reading the key document."""

    async def test_fetch_document(self, github_store, session):
        """Test content is decoded and the blob sha becomes the revision."""
        session.request.return_value = _response(
            json_body={"sha": "abc123", "content": _encoded('[{"key": "K"}]')}
        )

        document = await github_store.fetch("keys.json")

        assert document.content == '[{"key": "K"}]'
        assert document.revision == "abc123"
        session.request.assert_called_once_with("GET", FILE_URL, timeout=10.0, params=None)

    async def test_fetch_missing_document(self, github_store, session):
        """Test a 404 means no document."""
        session.request.return_value = _response(404, {"message": "Not Found"})
        assert await github_store.fetch("keys.json") is None

    async def test_fetch_uses_branch(self, session):
        """Test the configured branch is passed as ref."""
        store = GitHubContentsStore(
            token="secret-token", owner="acme", repo="key-store", branch="keys",
            session=session,
        )
        session.request.return_value = _response(
            json_body={"sha": "abc123", "content": _encoded("[]")}
        )

        await store.fetch("keys.json")

        assert session.request.call_args.kwargs["params"] == {"ref": "keys"}

    async def test_fetch_server_error(self, github_store, session):
        """Test non-404 failures raise StoreUnavailableError."""
        session.request.return_value = _response(500, text="boom")
        with pytest.raises(StoreUnavailableError, match="500"):
            await github_store.fetch("keys.json")

    async def test_fetch_network_error(self, github_store, session):
        """Test transport failures raise StoreUnavailableError."""
        session.request.side_effect = requests.exceptions.ConnectionError("unreachable")
        with pytest.raises(StoreUnavailableError, match="unreachable"):
            await github_store.fetch("keys.json")

    async def test_fetch_timeout(self, github_store, session):
        """Test timeouts raise StoreUnavailableError."""
        session.request.side_effect = requests.exceptions.Timeout("read timed out")
        with pytest.raises(StoreUnavailableError):
            await github_store.fetch("keys.json")

    async def test_fetch_directory(self, github_store, session):
        """Test a directory listing is not accepted as the document."""
        session.request.return_value = _response(json_body=[{"name": "keys.json"}])
        with pytest.raises(StoreUnavailableError, match="not a file"):
            await github_store.fetch("keys.json")

    async def test_fetch_large_document_reads_blob(self, github_store, session):
        """Test a file listed without inline content is read through the blob API."""
        session.request.side_effect = [
            _response(
                json_body={"sha": "bigsha", "content": "", "encoding": "none", "size": 2000000}
            ),
            _response(
                json_body={
                    "sha": "bigsha",
                    "content": _encoded('[{"key": "K"}]'),
                    "encoding": "base64",
                }
            ),
        ]

        document = await github_store.fetch("keys.json")

        assert document.content == '[{"key": "K"}]'
        assert document.revision == "bigsha"
        assert session.request.call_args.args == ("GET", BLOB_URL)

    async def test_fetch_large_document_blob_error(self, github_store, session):
        """Test a failed blob read is a store failure, not an empty document."""
        session.request.side_effect = [
            _response(json_body={"sha": "bigsha", "content": "", "encoding": "none"}),
            _response(404, {"message": "Not Found"}),
        ]
        with pytest.raises(StoreUnavailableError, match="blob"):
            await github_store.fetch("keys.json")


@pytest.mark.asyncio
@pytest.mark.integration
class TestGitHubStoreReplace:
    """Tests for writing the key document."""

    async def test_replace_document(self, github_store, session):
        """Test the write carries message, encoded content and revision."""
        session.request.return_value = _response(json_body={"content": {"sha": "def456"}})

        revision = await github_store.replace(
            "keys.json", "[]", "abc123", "Cleanup: Removed 1 expired key(s)"
        )

        assert revision == "def456"
        method, url = session.request.call_args.args
        assert (method, url) == ("PUT", FILE_URL)
        assert session.request.call_args.kwargs["json"] == {
            "message": "Cleanup: Removed 1 expired key(s)",
            "content": _encoded("[]"),
            "sha": "abc123",
        }

    async def test_create_document(self, session):
        """Test creation omits the sha and includes the branch."""
        store = GitHubContentsStore(
            token="secret-token", owner="acme", repo="key-store", branch="keys",
            session=session,
        )
        session.request.return_value = _response(201, {"content": {"sha": "new1"}})

        revision = await store.replace("keys.json", "[]", None, "Add key for alice (1 Day)")

        assert revision == "new1"
        body = session.request.call_args.kwargs["json"]
        assert "sha" not in body
        assert body["branch"] == "keys"

    async def test_replace_conflict(self, github_store, session):
        """Test 409 is a revision conflict."""
        session.request.return_value = _response(409, {"message": "conflict"})
        with pytest.raises(StoreConflictError):
            await github_store.replace("keys.json", "[]", "stale", "Renew key for alice")

    async def test_replace_missing_sha(self, github_store, session):
        """Test 422 about the sha is a revision conflict."""
        session.request.return_value = _response(
            422, {"message": "Invalid request"}, text='Invalid request. "sha" wasn\'t supplied.'
        )
        with pytest.raises(StoreConflictError):
            await github_store.replace("keys.json", "[]", None, "Add key for alice (1 Day)")

    async def test_replace_other_validation_error(self, github_store, session):
        """Test other 422 responses are store failures."""
        session.request.return_value = _response(422, {"message": "Invalid path"})
        with pytest.raises(StoreUnavailableError):
            await github_store.replace("keys.json", "[]", "abc123", "Renew key for alice")

    async def test_replace_forbidden(self, github_store, session):
        """Test permission errors are store failures."""
        session.request.return_value = _response(403, {"message": "Forbidden"})
        with pytest.raises(StoreUnavailableError, match="403"):
            await github_store.replace("keys.json", "[]", "abc123", "Renew key for alice")

    async def test_replace_without_new_sha(self, github_store, session):
        """Test a success response without the new sha is a store failure."""
        session.request.return_value = _response(json_body={"commit": {}})
        with pytest.raises(StoreUnavailableError, match="sha"):
            await github_store.replace("keys.json", "[]", "abc123", "Renew key for alice")


@pytest.mark.asyncio
@pytest.mark.integration
class TestGitHubStoreLargeDocument:
    """Tests for handlers working on a document too large to be inlined."""

    async def test_generate_keeps_existing_records(
        self, github_store, session, clock, make_record, handler_options
    ):
        """Test generating a key appends to a large document instead of replacing it."""
        existing = [
            make_record("bob", clock.now + timedelta(days=1)),
            make_record("carol", clock.now + timedelta(days=2)),
        ]
        session.request.side_effect = [
            _response(json_body={"sha": "bigsha", "content": "", "encoding": "none"}),
            _response(
                json_body={
                    "sha": "bigsha",
                    "content": _encoded(json.dumps(existing)),
                    "encoding": "base64",
                }
            ),
            _response(json_body={"content": {"sha": "newsha"}}),
        ]
        handler = GenerateKeyHandler(
            key_repository=DocumentKeyRepository(store=github_store, path="keys.json"),
            **handler_options,
        )

        await handler.handle(GenerateKeyCommand(username="alice", duration="24"))

        body = session.request.call_args.kwargs["json"]
        written = json.loads(base64.b64decode(body["content"]).decode("utf-8"))
        assert body["sha"] == "bigsha"
        assert [record["username"] for record in written] == ["bob", "carol", "alice"]
