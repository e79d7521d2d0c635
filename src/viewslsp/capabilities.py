"""Client capabilities negotiated once at ``initialize``."""
from __future__ import annotations

from dataclasses import dataclass

from lsprotocol import types as lsp


@dataclass(frozen=True)
class ClientCapabilities:
    configuration: bool = False
    workspace_folders: bool = False
    diagnostic_related_information: bool = False

    @classmethod
    def from_lsp(cls, caps: lsp.ClientCapabilities | None) -> 'ClientCapabilities':
        """Reduce the client's advertised capabilities to the flags the server uses."""
        if caps is None:
            return cls()
        workspace = caps.workspace
        publish = caps.text_document.publish_diagnostics if caps.text_document else None
        return cls(
            configuration=bool(workspace and workspace.configuration),
            workspace_folders=bool(workspace and workspace.workspace_folders),
            diagnostic_related_information=bool(publish and publish.related_information),
        )
