"""
Cell caching strategy selection.

Maps the configured cache method to a CacheStrategy: the backend kind plus
the settings specific to it. The strategy is resolved once per export or
import call and is otherwise opaque to the orchestrators; readers ask it
whether a workbook should be streamed instead of fully materialized.

Example:
    strategy = resolve_cache_strategy(settings)
    if strategy.streaming_for(os.path.getsize(path)):
        ...
"""

import importlib.util
import logging
import os
import tempfile
from dataclasses import dataclass, field
from typing import Any

from sheetbridge.config import Settings
from sheetbridge.exceptions.spreadsheet_exceptions import CachingUnavailableError
from sheetbridge.models.spreadsheet_models import CacheMethod

logger = logging.getLogger(__name__)

IN_MEMORY_METHODS = frozenset(
    {CacheMethod.MEMORY, CacheMethod.MEMORY_SERIALIZED, CacheMethod.MEMORY_GZIP}
)

# Module each backend needs at runtime.
REQUIRED_MODULES = {
    CacheMethod.MEMORY_GZIP: "zlib",
    CacheMethod.MEMCACHE: "pymemcache",
    CacheMethod.SQLITE: "sqlite3",
}


@dataclass(frozen=True)
class CacheStrategy:
    """
    A resolved cell caching backend.

    Attributes:
        method: The backend kind.
        settings: Backend-specific settings (memory limit, directory,
            memcache host/port/ttl, sqlite database).
    """

    method: CacheMethod
    settings: dict[str, Any] = field(default_factory=dict)

    @property
    def in_memory(self) -> bool:
        return self.method in IN_MEMORY_METHODS

    def streaming_for(self, file_size: int) -> bool:
        """
        Tell whether a workbook of the given size should be streamed.

        Args:
            file_size: Size of the workbook file in bytes.

        Returns:
            False for the in-memory kinds, True once a temp-file backed
            cache would spill (the file exceeds the memory limit), and
            always True for the external and disk database backends.
        """
        if self.in_memory:
            return False
        if self.method is CacheMethod.TEMP_FILE:
            return file_size > self.settings["memory_limit_mb"] * 1024 * 1024
        return True


def _parse_method(value: str | None) -> CacheMethod:
    try:
        return CacheMethod((value or "").strip().lower())
    except ValueError:
        if value:
            logger.debug(f"Unknown cache method {value!r}, using memory")
        return CacheMethod.MEMORY


def _method_settings(method: CacheMethod, settings: Settings) -> dict[str, Any]:
    if method is CacheMethod.TEMP_FILE:
        return {
            "memory_limit_mb": settings.cache_memory_limit_mb,
            "directory": settings.cache_directory or tempfile.gettempdir(),
        }
    if method is CacheMethod.MEMCACHE:
        return {
            "host": settings.cache_memcache_host,
            "port": settings.cache_memcache_port,
            "ttl": settings.cache_ttl,
        }
    if method is CacheMethod.SQLITE:
        return {"database": settings.cache_sqlite_database or ":memory:"}
    return {}


def resolve_cache_strategy(settings: Settings) -> CacheStrategy:
    """
    Resolve the configured cache method into a usable strategy.

    Unknown or unset methods default to plain in-memory caching.

    Args:
        settings: Settings carrying the cache configuration.

    Returns:
        The resolved CacheStrategy.

    Raises:
        CachingUnavailableError: If the backend cannot be used in this
            runtime (missing module, unwritable cache directory).
    """
    method = _parse_method(settings.cache_method)
    method_settings = _method_settings(method, settings)

    module = REQUIRED_MODULES.get(method)
    if module is not None and importlib.util.find_spec(module) is None:
        raise CachingUnavailableError(
            method=method.value,
            reason=f"module '{module}' is not installed",
        )

    if method is CacheMethod.TEMP_FILE:
        directory = method_settings["directory"]
        if not os.path.isdir(directory) or not os.access(directory, os.W_OK):
            raise CachingUnavailableError(
                method=method.value,
                reason=f"cache directory is not writable: {directory}",
            )

    return CacheStrategy(method=method, settings=method_settings)
