"""
Validation settings and their cache.

When the client supports ``workspace/configuration`` the settings are
resource-scoped: each document URI gets its own fetch, cached until the next
``workspace/didChangeConfiguration`` or until the document is closed.
Otherwise a single global :class:`Settings` instance is used and replaced
from the configuration-change payload.

Cached entries are the fetch tasks themselves, so concurrent lookups for the
same URI share one request.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

SETTINGS_SECTION = 'languageServerViews'

DEFAULT_MAX_NUMBER_OF_PROBLEMS = 100
TRACE_LEVELS = ('off', 'messages', 'verbose')


@dataclass(frozen=True)
class Settings:
    max_number_of_problems: int = DEFAULT_MAX_NUMBER_OF_PROBLEMS
    trace_server: str = 'off'
    log_level: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> 'Settings':
        """Build settings from a ``languageServerViews`` section.

        Missing or malformed values fall back to the defaults.
        """
        if not isinstance(payload, dict):
            return cls()
        max_problems = payload.get('maxNumberOfProblems', DEFAULT_MAX_NUMBER_OF_PROBLEMS)
        if isinstance(max_problems, bool) or not isinstance(max_problems, (int, float)):
            max_problems = DEFAULT_MAX_NUMBER_OF_PROBLEMS
        trace = payload.get('trace') or {}
        trace_server = trace.get('server', 'off') if isinstance(trace, dict) else 'off'
        if trace_server not in TRACE_LEVELS:
            trace_server = 'off'
        log_level = payload.get('logLevel')
        return cls(
            max_number_of_problems=int(max_problems),
            trace_server=trace_server,
            log_level=log_level if isinstance(log_level, str) else None,
        )


def section_from_change(settings: Any) -> Any:
    """Pull the ``languageServerViews`` section out of a didChangeConfiguration payload."""
    if isinstance(settings, dict):
        return settings.get(SETTINGS_SECTION)
    return getattr(settings, SETTINGS_SECTION, None)


FetchConfiguration = Callable[[str], Awaitable[Any]]


class SettingsCache:
    """Per-resource (or global) :class:`Settings` lookup.

    *fetch_configuration* is called with a resource URI and returns the raw
    ``languageServerViews`` section for it.
    """

    def __init__(self, resource_scoped: bool, fetch_configuration: FetchConfiguration | None = None):
        self._resource_scoped = resource_scoped
        self._fetch_configuration = fetch_configuration
        self.global_settings = Settings()
        self._by_uri: dict[str, asyncio.Future] = {}
        # Last successfully fetched settings, used when a re-fetch fails.
        self._last_known: dict[str, Settings] = {}

    @property
    def resource_scoped(self) -> bool:
        return self._resource_scoped

    async def get(self, resource: str) -> Settings:
        if not self._resource_scoped or self._fetch_configuration is None:
            return self.global_settings
        pending = self._by_uri.get(resource)
        if pending is None:
            pending = asyncio.ensure_future(self._fetch(resource))
            self._by_uri[resource] = pending
        return await asyncio.shield(pending)

    async def _fetch(self, resource: str) -> Settings:
        try:
            raw = await self._fetch_configuration(resource)
        except Exception:
            logger.warning('SettingsCache: configuration fetch failed for %s', resource, exc_info=True)
            if self._by_uri.get(resource) is asyncio.current_task():
                del self._by_uri[resource]
            return self._last_known.get(resource, self.global_settings)
        settings = Settings.from_payload(raw)
        # A document closed mid-fetch must not reappear in the fallback map.
        if self._by_uri.get(resource) is asyncio.current_task():
            self._last_known[resource] = settings
        return settings

    def on_configuration_change(self, settings: Any) -> None:
        """Apply a ``workspace/didChangeConfiguration`` payload."""
        if self._resource_scoped:
            self._by_uri.clear()
        else:
            self.global_settings = Settings.from_payload(section_from_change(settings))

    def forget(self, resource: str) -> None:
        """Drop the cached entry for a closed document."""
        self._by_uri.pop(resource, None)
        self._last_known.pop(resource, None)

    def __contains__(self, resource: str) -> bool:
        return resource in self._by_uri

    def __len__(self) -> int:
        return len(self._by_uri)
