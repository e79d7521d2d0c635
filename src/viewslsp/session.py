"""
Per-connection server state.

A :class:`Session` is created on ``initialize`` and torn down on
``shutdown``.  It owns the open documents, the settings cache, the
validation queue and the thread pool used for project discovery; the pygls
handlers only translate protocol messages into calls on it.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable

from lsprotocol import types as lsp

from viewslsp import views
from viewslsp.capabilities import ClientCapabilities
from viewslsp.document import Document, DocumentSet
from viewslsp.settings import FetchConfiguration, SettingsCache
from viewslsp.validation import ValidationQueue, validate_document

logger = logging.getLogger(__name__)

Publish = Callable[[str, list[lsp.Diagnostic]], None]


class Session:

    def __init__(
        self,
        capabilities: ClientCapabilities,
        publish: Publish,
        fetch_configuration: FetchConfiguration | None = None,
        parse: Callable[..., Any] = views.parse,
    ):
        self.capabilities = capabilities
        self.publish = publish
        self.parse = parse
        self.documents = DocumentSet()
        self.settings = SettingsCache(capabilities.configuration, fetch_configuration)
        self.executor = ThreadPoolExecutor(max_workers=3, thread_name_prefix='viewslsp-scan')
        self.queue = ValidationQueue(self._validate_uri)

    # ------------------------------------------------------------------
    # Document lifecycle
    # ------------------------------------------------------------------

    def open_document(self, uri: str, text: str, version: int = 0) -> Document:
        doc = self.documents.open(uri, text, version)
        self.queue.schedule(uri)
        return doc

    def change_document(self, uri: str, text: str, version: int | None = None) -> Document:
        doc = self.documents.change(uri, text, version)
        self.queue.schedule(uri)
        return doc

    def close_document(self, uri: str) -> None:
        self.queue.cancel(uri)
        self.documents.close(uri)
        self.settings.forget(uri)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def configuration_changed(self, settings: Any) -> None:
        """Invalidate cached settings and re-validate every open document."""
        self.settings.on_configuration_change(settings)
        for doc in self.documents.all():
            self.queue.schedule(doc.uri)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    async def validate(self, document: Document) -> None:
        await validate_document(self, document)

    async def _validate_uri(self, uri: str) -> None:
        doc = self.documents.get(uri)
        if doc is None:
            return
        await self.validate(doc)

    def shutdown(self) -> None:
        logger.debug('Session.shutdown: %d open documents', len(self.documents))
        self.queue.shutdown()
        self.executor.shutdown(wait=False)
