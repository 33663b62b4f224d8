"""
Tests for cache strategy selection.
"""

import os
from pathlib import Path
from unittest import mock

import pytest

from sheetbridge.cache_strategy import CacheStrategy, resolve_cache_strategy
from sheetbridge.config import Settings
from sheetbridge.exceptions.spreadsheet_exceptions import CachingUnavailableError
from sheetbridge.models.spreadsheet_models import CacheMethod, ResultCode


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestResolveCacheStrategy:
    """Tests for resolve_cache_strategy."""

    def test_default_is_memory(self) -> None:
        """Test that the default configuration resolves to memory."""
        strategy = resolve_cache_strategy(make_settings())

        assert strategy.method is CacheMethod.MEMORY
        assert strategy.settings == {}

    @pytest.mark.parametrize("value", ["", "bogus", "  "])
    def test_unknown_or_unset_falls_back_to_memory(self, value: str) -> None:
        """Test that unknown method names default to memory."""
        strategy = resolve_cache_strategy(make_settings(cache_method=value))

        assert strategy.method is CacheMethod.MEMORY

    def test_method_name_is_case_insensitive(self) -> None:
        """Test that method names are normalized."""
        strategy = resolve_cache_strategy(make_settings(cache_method="Memory_GZip"))

        assert strategy.method is CacheMethod.MEMORY_GZIP

    def test_temp_file_settings(self, temp_dir: Path) -> None:
        """Test that temp_file carries the memory limit and directory."""
        strategy = resolve_cache_strategy(
            make_settings(
                cache_method="temp_file",
                cache_directory=str(temp_dir),
                cache_memory_limit_mb=8,
            )
        )

        assert strategy.method is CacheMethod.TEMP_FILE
        assert strategy.settings == {"memory_limit_mb": 8, "directory": str(temp_dir)}

    def test_temp_file_missing_directory_is_unavailable(self, temp_dir: Path) -> None:
        """Test that a missing cache directory makes temp_file unavailable."""
        settings = make_settings(
            cache_method="temp_file",
            cache_directory=str(temp_dir / "missing"),
        )

        with pytest.raises(CachingUnavailableError) as exc_info:
            resolve_cache_strategy(settings)

        assert exc_info.value.method == "temp_file"
        assert exc_info.value.result_code is ResultCode.CACHING_METHOD_UNAVAILABLE

    def test_memcache_settings(self) -> None:
        """Test that memcache carries host, port and ttl when available."""
        settings = make_settings(
            cache_method="memcache",
            cache_memcache_host="cache.local",
            cache_memcache_port=11222,
            cache_ttl=60,
        )

        with mock.patch("importlib.util.find_spec", return_value=object()):
            strategy = resolve_cache_strategy(settings)

        assert strategy.method is CacheMethod.MEMCACHE
        assert strategy.settings == {"host": "cache.local", "port": 11222, "ttl": 60}

    def test_missing_module_is_unavailable(self) -> None:
        """Test that a backend whose module is missing is unavailable."""
        with mock.patch("importlib.util.find_spec", return_value=None):
            with pytest.raises(CachingUnavailableError) as exc_info:
                resolve_cache_strategy(make_settings(cache_method="memcache"))

        assert "pymemcache" in exc_info.value.message

    def test_sqlite_defaults_to_in_memory_database(self) -> None:
        """Test the sqlite backend settings."""
        strategy = resolve_cache_strategy(make_settings(cache_method="sqlite"))

        assert strategy.method is CacheMethod.SQLITE
        assert strategy.settings == {"database": ":memory:"}


class TestStreamingDecision:
    """Tests for CacheStrategy.streaming_for."""

    @pytest.mark.parametrize(
        "method",
        [CacheMethod.MEMORY, CacheMethod.MEMORY_SERIALIZED, CacheMethod.MEMORY_GZIP],
    )
    def test_in_memory_never_streams(self, method: CacheMethod) -> None:
        """Test that in-memory kinds always materialize the workbook."""
        strategy = CacheStrategy(method=method)

        assert strategy.in_memory is True
        assert strategy.streaming_for(10**9) is False

    def test_temp_file_streams_above_memory_limit(self) -> None:
        """Test that temp_file streams only files over the memory limit."""
        strategy = CacheStrategy(
            method=CacheMethod.TEMP_FILE,
            settings={"memory_limit_mb": 1, "directory": os.getcwd()},
        )

        assert strategy.streaming_for(1024) is False
        assert strategy.streaming_for(2 * 1024 * 1024) is True

    def test_external_backends_always_stream(self) -> None:
        """Test that memcache and sqlite always stream."""
        assert CacheStrategy(method=CacheMethod.SQLITE).streaming_for(0) is True
        assert CacheStrategy(method=CacheMethod.MEMCACHE).streaming_for(0) is True
