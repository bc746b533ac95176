"""Content store: blobs addressed by the hash of their bytes."""

from .errors import ObjectNotFound
from .models import blob_id
from .storage import Storage


class ContentStore:
    """Append-only, deduplicating map from blob id to bytes."""

    def __init__(self, storage: Storage) -> None:
        self.storage = storage

    def put(self, content: bytes) -> str:
        """Store ``content`` and return its id. Idempotent."""
        object_id = blob_id(content)
        self.storage.put_blob(object_id, content)
        return object_id

    def get(self, object_id: str) -> bytes:
        content = self.storage.get_blob(object_id)
        if content is None:
            raise ObjectNotFound(object_id)
        return content

    def __contains__(self, object_id: str) -> bool:
        return self.storage.has_blob(object_id)
