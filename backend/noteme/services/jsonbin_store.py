"""
NoteMe Backend — JSONBin.io Document Store Client
==================================================

What:  Reads and writes the single NoteMe document held in a JSONBin.io bin.
Why:   JSONBin gives a hosted JSON document with a plain HTTP API, which is
       all a serverless notes endpoint needs for persistence.
How:   httpx.AsyncClient; GET {base}/b/{bin_id}/latest to read, PUT
       {base}/b/{bin_id} with the full document to write. Both requests carry
       the access key in the X-Access-Key header.
Who:   Instantiated once at app startup (lifespan); used by NotesService and
       by the site builder.

Wire format:
    GET  /b/{bin_id}/latest  →  {"record": <Document>, "metadata": {...}}
    PUT  /b/{bin_id}         ←  <Document>

Failure policy:
    - No retries. A failed read raises StoreUnavailableError and a failed
      write raises StoreWriteFailedError; the route's exception handler
      turns both into a generic 500.
    - A failed read is NEVER converted into an empty document. Writing that
      empty document back on the next mutation would erase every user.

Concurrency:
    JSONBin offers no compare-and-swap on a bin, so writes are last-writer-wins.
    Two requests that both read before either writes will lose one update.
"""

import logging
import time
from typing import Optional

import httpx
from pydantic import ValidationError as SchemaValidationError

from noteme.config import settings
from noteme.exceptions import StoreUnavailableError, StoreWriteFailedError
from noteme.schemas.document import Document
from noteme.services.store_base import DocumentStore

logger = logging.getLogger(__name__)

# Store response bodies are kept for diagnostics only; cap what goes into logs
MAX_LOGGED_BODY = 1000


class JsonBinDocumentStore(DocumentStore):
    """
    DocumentStore backed by one JSONBin.io bin.

    Args:
        bin_id:   Document identifier (secret)
        api_key:  Access key sent as X-Access-Key (secret)
        base_url: API root, e.g. https://api.jsonbin.io/v3
        timeout:  Per-request timeout in seconds
        client:   Optional shared httpx.AsyncClient. When omitted the store
                  creates and owns one, and closes it in aclose().
    """

    name = "jsonbin"

    def __init__(
        self,
        bin_id: str,
        api_key: str,
        base_url: str = "https://api.jsonbin.io/v3",
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.bin_id = bin_id
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def configured(self) -> bool:
        return bool(self.bin_id and self.api_key)

    @property
    def bin_url(self) -> str:
        return f"{self.base_url}/b/{self.bin_id}"

    def _headers(self) -> dict:
        return {"X-Access-Key": self.api_key}

    async def read(self) -> Document:
        """
        Fetch the latest version of the document.

        Raises:
            StoreUnavailableError: not configured, transport failure,
                non-2xx status, non-JSON body, or malformed record.
        """
        if not self.configured:
            raise StoreUnavailableError(
                message="Document store not configured",
                context={"store": self.name},
            )

        start_time = time.perf_counter()
        try:
            response = await self._client.get(
                f"{self.bin_url}/latest",
                headers=self._headers(),
            )
        except httpx.HTTPError as e:
            logger.error("JSONBin read failed: %s: %s", type(e).__name__, str(e))
            raise StoreUnavailableError(
                context={"store": self.name, "error_type": type(e).__name__},
            )

        duration_ms = (time.perf_counter() - start_time) * 1000

        if not response.is_success:
            logger.error(
                "JSONBin read returned %d after %.0fms",
                response.status_code,
                duration_ms,
            )
            raise StoreUnavailableError(
                context={
                    "store": self.name,
                    "store_status": response.status_code,
                    "response_body": response.text[:MAX_LOGGED_BODY],
                },
            )

        try:
            payload = response.json()
        except ValueError:
            raise StoreUnavailableError(
                message="Document store returned a non-JSON body",
                context={"store": self.name, "response_body": response.text[:MAX_LOGGED_BODY]},
            )

        if not isinstance(payload, dict):
            raise StoreUnavailableError(
                message="Document store returned an unexpected body",
                context={"store": self.name},
            )

        try:
            document = Document.from_record(payload.get("record"))
        except SchemaValidationError as e:
            raise StoreUnavailableError(
                message="Stored document is malformed",
                context={"store": self.name, "errors": e.error_count()},
            )

        logger.debug(
            "JSONBin read ok in %.0fms (%d users)", duration_ms, len(document.users)
        )
        return document

    async def write(self, document: Document) -> None:
        """
        Replace the bin's content with `document`.

        Raises:
            StoreWriteFailedError: not configured, transport failure, or
                non-2xx status (with the store's response body attached).
        """
        if not self.configured:
            raise StoreWriteFailedError(
                message="Document store not configured",
                context={"store": self.name},
            )

        start_time = time.perf_counter()
        try:
            response = await self._client.put(
                self.bin_url,
                json=document.to_record(),
                headers=self._headers(),
            )
        except httpx.HTTPError as e:
            logger.error("JSONBin write failed: %s: %s", type(e).__name__, str(e))
            raise StoreWriteFailedError(
                context={"store": self.name, "error_type": type(e).__name__},
            )

        duration_ms = (time.perf_counter() - start_time) * 1000

        if not response.is_success:
            body = response.text
            logger.error(
                "JSONBin write returned %d after %.0fms: %s",
                response.status_code,
                duration_ms,
                body[:MAX_LOGGED_BODY],
            )
            raise StoreWriteFailedError(
                response_body=body,
                status_code=response.status_code,
                context={"store": self.name},
            )

        logger.info(
            "JSONBin write ok in %.0fms (%d users)", duration_ms, len(document.users)
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def jsonbin_store_from_settings(client: Optional[httpx.AsyncClient] = None) -> JsonBinDocumentStore:
    """Build a store from the JSONBIN_* settings."""
    return JsonBinDocumentStore(
        bin_id=settings.jsonbin_bin_id,
        api_key=settings.jsonbin_api_key,
        base_url=settings.jsonbin_base_url,
        timeout=settings.store_timeout_seconds,
        client=client,
    )
