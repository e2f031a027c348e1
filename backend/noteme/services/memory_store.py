"""
In-process DocumentStore.

Keeps the document as a serialized JSON record, so every read() hands out an
independent copy, the same as a remote store would. Counts reads and writes so
tests can assert that a rejected request never wrote.
"""

import copy
from typing import Any, Dict, List, Optional

from noteme.schemas.document import Document
from noteme.services.store_base import DocumentStore


class InMemoryDocumentStore(DocumentStore):
    """Last-writer-wins store living in process memory."""

    name = "memory"

    def __init__(self, record: Optional[Dict[str, Any]] = None):
        self._record: Dict[str, Any] = copy.deepcopy(record) if record else {"users": []}
        self.read_count = 0
        self.write_count = 0
        self.history: List[Dict[str, Any]] = []

    @property
    def record(self) -> Dict[str, Any]:
        return copy.deepcopy(self._record)

    async def read(self) -> Document:
        self.read_count += 1
        return Document.from_record(copy.deepcopy(self._record))

    async def write(self, document: Document) -> None:
        self.write_count += 1
        self._record = document.to_record()
        self.history.append(copy.deepcopy(self._record))
