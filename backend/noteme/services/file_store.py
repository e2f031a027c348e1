"""
NoteMe Backend — Local File Document Store
===========================================

What:  DocumentStore that keeps the document in a local JSON file (data.json).
Why:   Lets the API and the site builder run without JSONBin credentials
       (local development, offline builds).
How:   aiofiles for non-blocking reads/writes. Writes go to a sibling temp
       file that is then renamed over the target, so a crash mid-write leaves
       the previous document intact.

The file holds the bare document (`{"users": [...]}`), not JSONBin's
`{"record": ...}` envelope.
"""

import json
import logging
import os
from pathlib import Path

import aiofiles
from pydantic import ValidationError as SchemaValidationError

from noteme.exceptions import StoreUnavailableError, StoreWriteFailedError
from noteme.schemas.document import Document
from noteme.services.store_base import DocumentStore

logger = logging.getLogger(__name__)


class FileDocumentStore(DocumentStore):
    """DocumentStore backed by a JSON file on disk."""

    name = "file"

    def __init__(self, path: str):
        self.path = Path(path)

    async def read(self) -> Document:
        """
        Load the document from disk.

        Raises:
            StoreUnavailableError: file missing, unreadable, or not a valid document.
        """
        if not self.path.exists():
            raise StoreUnavailableError(
                message="Data file not found",
                context={"store": self.name, "path": str(self.path)},
            )

        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                raw = await f.read()
        except OSError as e:
            logger.error("Failed to read %s: %s", self.path, str(e))
            raise StoreUnavailableError(
                context={"store": self.name, "path": str(self.path), "os_error": str(e)},
            )

        try:
            record = json.loads(raw) if raw.strip() else None
            return Document.from_record(record)
        except (ValueError, SchemaValidationError) as e:
            raise StoreUnavailableError(
                message="Data file is not a valid document",
                context={"store": self.name, "path": str(self.path), "error_type": type(e).__name__},
            )

    async def write(self, document: Document) -> None:
        """
        Replace the file contents with `document`.

        Raises:
            StoreWriteFailedError: the directory is not writable or the disk is full.
        """
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        body = json.dumps(document.to_record(), ensure_ascii=False, indent=2)

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(body)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error("Failed to write %s: %s", self.path, str(e))
            raise StoreWriteFailedError(
                context={"store": self.name, "path": str(self.path), "os_error": str(e)},
            )

        logger.info("Data file written: %s (%d users)", self.path, len(document.users))
