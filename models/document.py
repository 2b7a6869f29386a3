"""
Untitled in-memory documents used to display captured log snapshots
"""

import threading
from typing import Dict, List, Optional

from utils.events import Disposable, EventEmitter


class VirtualDocument:
    """An unsaved text document identified by its title"""

    def __init__(self, title: str):
        self.title = title
        self._text = ""
        self._lock = threading.Lock()

    @property
    def is_untitled(self) -> bool:
        return True

    def insert(self, offset: int, text: str):
        """Insert text at a character offset (0 is the start of the document)"""
        with self._lock:
            offset = max(0, min(offset, len(self._text)))
            self._text = self._text[:offset] + text + self._text[offset:]

    def get_text(self) -> str:
        with self._lock:
            return self._text

    def to_dict(self) -> Dict[str, str]:
        return {"title": self.title, "text": self.get_text()}

    def __repr__(self) -> str:
        return f"VirtualDocument({self.title!r})"


class DocumentStore:
    """
    Keeps opened documents and notifies hosts when one should be shown

    Opening a document replaces any earlier one with the same title; only the
    most recent max_documents are kept.
    """

    def __init__(self, max_documents: int = 50):
        self.max_documents = max_documents
        self._documents: List[VirtualDocument] = []
        self._lock = threading.Lock()
        self._on_did_show = EventEmitter("document shown")

    def open_untitled(self, title: str) -> VirtualDocument:
        document = VirtualDocument(title)
        with self._lock:
            self._documents = [d for d in self._documents if d.title != title]
            self._documents.append(document)
            del self._documents[: -self.max_documents]
        return document

    def show(self, document: VirtualDocument):
        self._on_did_show.fire(document)

    def on_did_show_document(self, listener) -> Disposable:
        return self._on_did_show.subscribe(listener)

    @property
    def documents(self) -> List[VirtualDocument]:
        with self._lock:
            return list(self._documents)

    def get(self, title: str) -> Optional[VirtualDocument]:
        with self._lock:
            for document in self._documents:
                if document.title == title:
                    return document
        return None
