"""Disk-backed KV store using diskcache."""

from typing import Iterable, Mapping, cast

from .base import KVStore, check_bytes

# Repository history is never evicted.
NO_LIMIT = 2**62


class Disk(KVStore):
    """KV store backed by diskcache (SQLite + mmap)."""

    def __init__(self, directory: str) -> None:
        from diskcache import Cache as DiskCache

        self.store = DiskCache(
            directory, size_limit=NO_LIMIT, eviction_policy="none"
        )

    def get(self, key: str) -> bytes | None:
        return cast(bytes | None, self.store.get(key))

    def set(self, key: str, value: bytes) -> None:
        check_bytes(key, value)
        self.store[key] = value

    def get_many(self, *keys: str) -> Mapping[str, bytes]:
        return {k: v for k in keys if (v := self.get(k)) is not None}

    def set_many(self, **kwargs: bytes) -> None:
        for key, value in kwargs.items():
            check_bytes(key, value)
        with self.store.transact():
            for key, value in kwargs.items():
                self.store[key] = value

    def keys(self, prefix: str = "") -> Iterable[str]:
        for key in self.store.iterkeys():
            if isinstance(key, str) and key.startswith(prefix):
                yield key

    def __contains__(self, key: str) -> bool:
        return key in self.store

    def remove(self, key: str) -> None:
        try:
            del self.store[key]
        except KeyError:
            pass

    def clear(self) -> None:
        self.store.clear()

    def close(self) -> None:
        self.store.close()
