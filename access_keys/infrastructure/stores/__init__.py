"""
Document store adapters and the factory that picks one from settings.
"""
from django.conf import settings

from access_keys.infrastructure.stores.github_store import DEFAULT_API_URL, GitHubContentsStore
from access_keys.infrastructure.stores.memory_store import memory_store
from access_keys.ports.document_store import DocumentStore, StoreNotConfiguredError


def build_document_store() -> DocumentStore:
    """
    Build the document store configured in settings.KEY_STORE.

    Returns:
        DocumentStore instance

    Raises:
        StoreNotConfiguredError: If the backend is unknown or credentials are missing
    """
    config = settings.KEY_STORE
    backend = config.get("BACKEND", "github")

    if backend == "memory":
        return memory_store
    if backend == "github":
        return GitHubContentsStore(
            token=config.get("TOKEN"),
            owner=config.get("OWNER"),
            repo=config.get("REPO"),
            branch=config.get("BRANCH"),
            api_url=config.get("API_URL") or DEFAULT_API_URL,
            timeout=float(config.get("TIMEOUT_SECONDS", 10)),
        )
    raise StoreNotConfiguredError(f"Unknown key store backend: {backend}")
