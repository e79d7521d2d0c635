"""
Open-document store.

Each open document is kept as a :class:`Document` holding the latest full
text sent by the client (the server only advertises full-document sync).
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Document:
    uri: str
    text: str
    version: int = 0


class DocumentSet:
    """Documents currently open in the client, keyed by URI."""

    def __init__(self):
        self._docs: dict[str, Document] = {}

    def open(self, uri: str, text: str, version: int = 0) -> Document:
        doc = Document(uri=uri, text=text, version=version)
        self._docs[uri] = doc
        return doc

    def change(self, uri: str, text: str, version: int | None = None) -> Document:
        """Replace the text of *uri*; an unknown URI is treated as an open."""
        doc = self._docs.get(uri)
        if doc is None:
            return self.open(uri, text, version or 0)
        doc.text = text
        doc.version = version if version is not None else doc.version + 1
        return doc

    def close(self, uri: str) -> Document | None:
        return self._docs.pop(uri, None)

    def get(self, uri: str) -> Document | None:
        return self._docs.get(uri)

    def all(self) -> list[Document]:
        return list(self._docs.values())

    def __contains__(self, uri: str) -> bool:
        return uri in self._docs

    def __len__(self) -> int:
        return len(self._docs)
