"""In-memory KV store."""

from typing import Iterable, Mapping

from .base import KVStore, check_bytes


class Memory(KVStore):
    """A memory-backed KV store. State lives as long as the instance."""

    def __init__(self) -> None:
        self.memory: dict[str, bytes] = {}

    def get(self, key: str) -> bytes | None:
        return self.memory.get(key)

    def set(self, key: str, value: bytes) -> None:
        check_bytes(key, value)
        self.memory[key] = value

    def get_many(self, *keys: str) -> Mapping[str, bytes]:
        return {key: val for key in keys if (val := self.memory.get(key)) is not None}

    def set_many(self, **kwargs: bytes) -> None:
        for key, value in kwargs.items():
            check_bytes(key, value)
        self.memory.update(kwargs)

    def keys(self, prefix: str = "") -> Iterable[str]:
        return [key for key in self.memory if key.startswith(prefix)]

    def __contains__(self, key: str) -> bool:
        return key in self.memory

    def remove(self, key: str) -> None:
        self.memory.pop(key, None)

    def clear(self) -> None:
        self.memory.clear()
