from django.conf import settings

from access_keys.infrastructure.repositories.document_key_repository import (
    DEFAULT_DOCUMENT_PATH,
    DocumentKeyRepository,
)
from access_keys.infrastructure.stores import build_document_store


def build_key_repository() -> DocumentKeyRepository:
    """Build the key repository for the configured store and document path."""
    return DocumentKeyRepository(
        store=build_document_store(),
        path=settings.KEY_STORE.get("PATH") or DEFAULT_DOCUMENT_PATH,
    )
