"""Testes do cache de bases de conhecimento."""

import pytest

from expertsys.core import DSLSyntaxError, KnowledgeBaseCache, get_kb_cache
from expertsys.core.cache import reset_kb_cache


class TestKnowledgeBaseCache:
    def test_loads_once(self, weather_file):
        cache = KnowledgeBaseCache()

        first = cache.get_or_load(weather_file)
        second = cache.get_or_load(weather_file)

        assert first is second
        assert len(cache) == 1
        assert cache.get_stats()["total_accesses"] == 1

    def test_modified_file_is_reloaded(self, weather_file):
        cache = KnowledgeBaseCache()
        first = cache.get_or_load(weather_file)

        weather_file.write_text("1 если a-x то b-y\n", encoding="utf-8")
        second = cache.get_or_load(weather_file)

        assert second is not first
        assert len(second.rules) == 1

    def test_get_miss(self, weather_file):
        assert KnowledgeBaseCache().get(weather_file) is None

    def test_invalidate(self, weather_file, tmp_path):
        other = tmp_path / "other.kb"
        other.write_text("1 если a-x то b-y\n", encoding="utf-8")
        cache = KnowledgeBaseCache()
        cache.get_or_load(weather_file)
        cache.get_or_load(other)

        assert cache.invalidate(weather_file) == 1
        assert cache.invalidate(weather_file) == 0
        assert cache.invalidate() == 1
        assert len(cache) == 0

    def test_eviction(self, weather_file, tmp_path):
        other = tmp_path / "other.kb"
        other.write_text("1 если a-x то b-y\n", encoding="utf-8")
        cache = KnowledgeBaseCache(max_entries=1)

        cache.get_or_load(weather_file)
        cache.get_or_load(other)

        assert len(cache) == 1
        assert cache.get(weather_file) is None
        assert cache.get(other) is not None

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            KnowledgeBaseCache().get_or_load(tmp_path / "missing.kb")

    def test_errors_are_not_cached(self, tmp_path):
        path = tmp_path / "broken.kb"
        path.write_text("1 если a -x то b-y\n", encoding="utf-8")
        cache = KnowledgeBaseCache()

        with pytest.raises(DSLSyntaxError):
            cache.get_or_load(path)

        assert len(cache) == 0

    def test_stats(self, weather_file):
        cache = KnowledgeBaseCache(max_entries=5)
        cache.get_or_load(weather_file)

        stats = cache.get_stats()

        assert stats["entries"] == 1
        assert stats["max_entries"] == 5
        assert stats["files"][0] == {
            "path": "weather.kb",
            "rules": 6,
            "questions": 2,
            "accesses": 0,
        }


class TestGlobalCache:
    def test_singleton(self):
        assert get_kb_cache() is get_kb_cache()

    def test_reset(self):
        first = get_kb_cache()
        reset_kb_cache()

        assert get_kb_cache() is not first
