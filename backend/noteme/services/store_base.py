"""
NoteMe Backend — Abstract Document Store Interface
===================================================

What:  Abstract base class defining the contract for persisting the single
       JSON document.
Why:   The service must not care whether the document lives in JSONBin.io,
       in a local data.json, or in memory for a test.
How:   Concrete stores inherit from DocumentStore and implement read()/write().
Who:   Called by NotesService for every mutation and by the site builder.

Contract:
    - read() returns the WHOLE current document, or raises StoreUnavailableError.
      It never returns an empty document in place of a failure.
    - write() replaces the WHOLE document, or raises StoreWriteFailedError.
    - No revision token, no partial update, no retries: last writer wins.
      Two overlapping read → write cycles can lose one of the updates.

Implementations:
    - JsonBinDocumentStore:  JSONBin.io over HTTPS (production)
    - FileDocumentStore:     local JSON file (development, site builder)
    - InMemoryDocumentStore: test double with read/write counters
"""

import logging
from abc import ABC, abstractmethod

from noteme.schemas.document import Document

logger = logging.getLogger(__name__)


class DocumentStore(ABC):
    """Abstract full-document store."""

    #: Short name used in logs and the health endpoint
    name = "store"

    @abstractmethod
    async def read(self) -> Document:
        """
        Fetch the current document.

        Raises:
            StoreUnavailableError: transport failure, bad status, bad body,
                or the store is not configured.
        """
        ...

    @abstractmethod
    async def write(self, document: Document) -> None:
        """
        Replace the stored document with `document`.

        Raises:
            StoreWriteFailedError: the store rejected the write or it did not
                complete. Carries the store's response body when there is one.
        """
        ...

    async def health_check(self) -> bool:
        """
        Check if the store is reachable. Never raises.

        Default: a full read. Stores override when they have something cheaper.
        """
        try:
            await self.read()
            return True
        except Exception as e:
            logger.warning("%s health check failed: %s", self.name, str(e))
            return False

    async def aclose(self) -> None:
        """Release any held resources (HTTP clients, file handles)."""
        return None
