"""
Document validation.

:func:`validate_document` runs one pass of the pipeline for a document:
project context -> parser -> diagnostics -> publish.

:class:`ValidationQueue` serializes those passes per URI.  At most one run
per document is active; changes that arrive meanwhile collapse into a single
follow-up run, which reads the document text only when it starts.
"""
from __future__ import annotations

import asyncio
import inspect
import logging
from functools import partial
from typing import TYPE_CHECKING, Awaitable, Callable

from pygls.uris import to_fs_path

from viewslsp.context import ContextResolutionError, ProjectContext, resolve_context
from viewslsp.handlers.diagnostics import get_diagnostics

if TYPE_CHECKING:
    from viewslsp.document import Document
    from viewslsp.session import Session

logger = logging.getLogger(__name__)


async def validate_document(session: 'Session', document: 'Document') -> None:
    """Parse *document* and publish its diagnostics.

    Context and parser failures abort the run without publishing, leaving the
    previous diagnostics in place.
    """
    uri = document.uri
    settings = await session.settings.get(uri)
    # maxNumberOfProblems is fetched but not applied to the warning list.
    logger.debug('validate_document: %s v%d (maxNumberOfProblems=%d)',
                 uri, document.version, settings.max_number_of_problems)

    path = to_fs_path(uri) if uri.startswith('file:') else None
    if path is None:
        logger.debug('validate_document: %s is not a file URI, using an empty context', uri)
        context = ProjectContext()
    else:
        try:
            context = await resolve_context(path, executor=session.executor)
        except ContextResolutionError:
            logger.warning('validate_document: skipping %s', uri, exc_info=True)
            return

    try:
        parsed = session.parse(
            custom_fonts=context.custom_fonts,
            views=context.views_by_id,
            source=document.text,
            skip_comments=False,
            convert_slot_to_props=False,
        )
        if inspect.isawaitable(parsed):
            parsed = await parsed
    except Exception:
        logger.exception('validate_document: parser failed for %s', uri)
        return

    diagnostics = get_diagnostics(parsed.warnings)
    if uri not in session.documents:
        logger.debug('validate_document: %s closed during validation, not publishing', uri)
        return
    logger.debug('validate_document: %s -> %d diagnostics', uri, len(diagnostics))
    session.publish(uri, diagnostics)


class ValidationQueue:
    """Single-slot run queue per document URI."""

    def __init__(self, run: Callable[[str], Awaitable[None]]):
        self._run = run
        self._active: dict[str, asyncio.Task] = {}
        self._pending: set[str] = set()

    def schedule(self, uri: str) -> None:
        """Request a validation of *uri*; must be called from the event loop."""
        if uri in self._active:
            self._pending.add(uri)
            return
        self._start(uri)

    def _start(self, uri: str) -> None:
        task = asyncio.ensure_future(self._run(uri))
        self._active[uri] = task
        task.add_done_callback(partial(self._finished, uri))

    def _finished(self, uri: str, task: asyncio.Task) -> None:
        if self._active.get(uri) is task:
            del self._active[uri]
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error('ValidationQueue: run for %s failed', uri, exc_info=exc)
        if uri in self._pending:
            self._pending.discard(uri)
            self._start(uri)

    def cancel(self, uri: str) -> None:
        """Drop any pending run and cancel the active one for *uri*."""
        self._pending.discard(uri)
        task = self._active.pop(uri, None)
        if task is not None:
            task.cancel()

    def is_active(self, uri: str) -> bool:
        return uri in self._active

    async def join(self) -> None:
        """Wait until no run is active or pending."""
        while self._active:
            await asyncio.gather(*list(self._active.values()), return_exceptions=True)
            await asyncio.sleep(0)

    def shutdown(self) -> None:
        self._pending.clear()
        for uri in list(self._active):
            self.cancel(uri)
