"""
viewslsp Language Server.

Registers LSP capabilities and forwards protocol events to the per-connection
:class:`~viewslsp.session.Session`.
"""
from __future__ import annotations

import logging
import uuid

from pygls.lsp.server import LanguageServer
from lsprotocol import types as lsp

from viewslsp import __version__
from viewslsp.capabilities import ClientCapabilities
from viewslsp.handlers import get_completions, resolve_completion
from viewslsp.session import Session
from viewslsp.settings import SETTINGS_SECTION, section_from_change

logger = logging.getLogger(__name__)


class ViewsLanguageServer(LanguageServer):
    """pygls server holding the current :class:`Session`, if initialized."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.session: Session | None = None

    def start_session(self, capabilities: ClientCapabilities) -> Session:
        self.end_session()
        self.session = Session(
            capabilities,
            publish=self.publish_diagnostics,
            fetch_configuration=self.fetch_configuration,
        )
        return self.session

    def end_session(self) -> None:
        if self.session is not None:
            self.session.shutdown()
            self.session = None

    def publish_diagnostics(self, uri: str, diagnostics: list[lsp.Diagnostic]) -> None:
        self.text_document_publish_diagnostics(
            lsp.PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
        )

    async def fetch_configuration(self, scope_uri: str):
        result = await self.workspace_configuration_async(
            lsp.ConfigurationParams(items=[
                lsp.ConfigurationItem(scope_uri=scope_uri, section=SETTINGS_SECTION),
            ])
        )
        return result[0] if result else None


server = ViewsLanguageServer(
    'views-lsp', __version__,
    text_document_sync_kind=lsp.TextDocumentSyncKind.Full,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def apply_log_level(raw: str | None) -> None:
    """Set the root logger level from a string like 'debug', 'warning', etc."""
    if not raw:
        return
    level = getattr(logging, raw.upper(), None)
    if isinstance(level, int):
        logging.getLogger().setLevel(level)


def _log_level_from_init_options(options) -> str | None:
    if options is None:
        return None
    if isinstance(options, dict):
        return options.get('logLevel')
    # Some clients send a typed object; try attribute access
    return getattr(options, 'logLevel', None)


def _session() -> Session:
    if server.session is None:
        # Handlers only run after initialize; keep going with default capabilities.
        logger.warning('request received before initialize, starting a default session')
        return server.start_session(ClientCapabilities())
    return server.session


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

@server.feature(lsp.INITIALIZE)
def on_initialize(params: lsp.InitializeParams):
    capabilities = ClientCapabilities.from_lsp(params.capabilities)
    logger.info('initialize: %s', capabilities)
    server.start_session(capabilities)
    apply_log_level(_log_level_from_init_options(
        getattr(params, 'initialization_options', None)))


def _dynamic_registrations(capabilities: ClientCapabilities) -> list[lsp.Registration]:
    """Notifications the server subscribes to only when the client supports them."""
    methods = []
    if capabilities.configuration:
        methods.append(lsp.WORKSPACE_DID_CHANGE_CONFIGURATION)
    if capabilities.workspace_folders:
        # pygls keeps its workspace folder list current once these arrive.
        methods.append(lsp.WORKSPACE_DID_CHANGE_WORKSPACE_FOLDERS)
    return [lsp.Registration(id=str(uuid.uuid4()), method=m) for m in methods]


@server.feature(lsp.INITIALIZED)
async def on_initialized(params: lsp.InitializedParams):
    registrations = _dynamic_registrations(_session().capabilities)
    if not registrations:
        return
    try:
        await server.client_register_capability_async(
            lsp.RegistrationParams(registrations=registrations)
        )
    except Exception:
        logger.warning('initialized: dynamic registration failed', exc_info=True)
    else:
        logger.info('initialized: registered %s', ', '.join(r.method for r in registrations))


@server.feature(lsp.SHUTDOWN)
def on_shutdown(params=None):
    server.end_session()


# ---------------------------------------------------------------------------
# Workspace
# ---------------------------------------------------------------------------

@server.feature(lsp.WORKSPACE_DID_CHANGE_CONFIGURATION)
def did_change_configuration(params: lsp.DidChangeConfigurationParams):
    settings = getattr(params, 'settings', None) or {}
    section = section_from_change(settings)
    if isinstance(section, dict):
        apply_log_level(section.get('logLevel'))
    _session().configuration_changed(settings)


@server.feature(lsp.WORKSPACE_DID_CHANGE_WATCHED_FILES)
def did_change_watched_files(params: lsp.DidChangeWatchedFilesParams):
    """Acknowledge file-system watch notifications (no action needed for now)."""
    logger.debug('did_change_watched_files: %d changes', len(params.changes))


# ---------------------------------------------------------------------------
# Text document synchronisation
# ---------------------------------------------------------------------------

@server.feature(lsp.TEXT_DOCUMENT_DID_OPEN)
def did_open(params: lsp.DidOpenTextDocumentParams):
    td = params.text_document
    _session().open_document(td.uri, td.text, td.version)


@server.feature(lsp.TEXT_DOCUMENT_DID_CHANGE)
def did_change(params: lsp.DidChangeTextDocumentParams):
    td = params.text_document
    if not params.content_changes:
        logger.debug('did_change: no content changes for %s', td.uri)
        return
    # Full sync: the last change carries the whole text.
    source = params.content_changes[-1].text
    _session().change_document(td.uri, source, td.version)


@server.feature(lsp.TEXT_DOCUMENT_DID_CLOSE)
def did_close(params: lsp.DidCloseTextDocumentParams):
    _session().close_document(params.text_document.uri)


# ---------------------------------------------------------------------------
# Completion
# ---------------------------------------------------------------------------

@server.feature(
    lsp.TEXT_DOCUMENT_COMPLETION,
    lsp.CompletionOptions(resolve_provider=True),
)
def completion(params: lsp.CompletionParams) -> list[lsp.CompletionItem]:
    return get_completions()


@server.feature(lsp.COMPLETION_ITEM_RESOLVE)
def completion_resolve(item: lsp.CompletionItem) -> lsp.CompletionItem:
    return resolve_completion(item)
