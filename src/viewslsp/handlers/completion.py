"""
Completion handler.

Offers a fixed list of Views primitive blocks.  Items carry only an integer
``data`` tag; ``detail`` and ``documentation`` are attached lazily by
:func:`resolve_completion` from the same table.
"""
from __future__ import annotations

from dataclasses import dataclass

from lsprotocol import types as lsp


@dataclass(frozen=True)
class CompletionEntry:
    label: str
    kind: lsp.CompletionItemKind
    detail: str
    documentation: str


_ENTRIES: dict[int, CompletionEntry] = {
    1: CompletionEntry(
        'Vertical', lsp.CompletionItemKind.Class,
        'Views block',
        'Lays out its children from top to bottom.',
    ),
    2: CompletionEntry(
        'Horizontal', lsp.CompletionItemKind.Class,
        'Views block',
        'Lays out its children from left to right.',
    ),
    3: CompletionEntry(
        'Text', lsp.CompletionItemKind.Class,
        'Views block',
        'Displays the value of its `text` prop.',
    ),
    4: CompletionEntry(
        'Image', lsp.CompletionItemKind.Class,
        'Views block',
        'Displays the image referenced by its `source` prop.',
    ),
}


def get_completions() -> list[lsp.CompletionItem]:
    """Return the unresolved completion items."""
    return [
        lsp.CompletionItem(label=entry.label, kind=entry.kind, data=tag)
        for tag, entry in _ENTRIES.items()
    ]


def resolve_completion(item: lsp.CompletionItem) -> lsp.CompletionItem:
    """Attach detail text for a known ``data`` tag; unknown tags are returned as-is."""
    entry = _ENTRIES.get(item.data) if isinstance(item.data, int) else None
    if entry is not None:
        item.detail = entry.detail
        item.documentation = lsp.MarkupContent(
            kind=lsp.MarkupKind.Markdown,
            value=entry.documentation,
        )
    return item
