"""Tests for the Memory KV store."""

import pytest

from kvlet.kv.memory import Memory


class TestMemoryBasic:
    def test_set_get(self):
        m = Memory()
        m.set("k", b"v")
        assert m.get("k") == b"v"

    def test_get_missing(self):
        m = Memory()
        assert m.get("nope") is None

    def test_contains(self):
        m = Memory()
        m.set("k", b"v")
        assert "k" in m
        assert "nope" not in m

    def test_keys(self):
        m = Memory()
        m.set("a", b"1")
        m.set("b", b"2")
        assert set(m.keys()) == {"a", "b"}

    def test_keys_with_prefix(self):
        m = Memory()
        m.set_many(**{"__blob__x": b"1", "__blob__y": b"2", "__commit__x": b"3"})
        assert set(m.keys("__blob__")) == {"__blob__x", "__blob__y"}

    def test_set_many_get_many(self):
        m = Memory()
        m.set_many(a=b"1", b=b"2", c=b"3")
        result = m.get_many("a", "c", "missing")
        assert result == {"a": b"1", "c": b"3"}

    def test_overwrite(self):
        m = Memory()
        m.set("k", b"old")
        m.set("k", b"new")
        assert m.get("k") == b"new"

    def test_clear(self):
        m = Memory()
        m.set_many(a=b"1", b=b"2")
        m.clear()
        assert m.get("a") is None
        assert list(m.keys()) == []


class TestMemoryRemove:
    def test_remove(self):
        m = Memory()
        m.set("k", b"v")
        m.remove("k")
        assert "k" not in m

    def test_remove_missing_is_noop(self):
        m = Memory()
        m.remove("nope")
        assert list(m.keys()) == []


class TestMemoryTypes:
    def test_type_error_on_non_bytes(self):
        m = Memory()
        with pytest.raises(TypeError, match="Expected bytes"):
            m.set("k", "not bytes")  # type: ignore

    def test_set_many_rejects_whole_batch(self):
        m = Memory()
        with pytest.raises(TypeError, match="Expected bytes for b"):
            m.set_many(a=b"1", b="2")  # type: ignore
        assert "a" not in m
