"""
NoteMe — Static Site Builder
=============================

What:  Renders the document into a directory of static HTML pages.
Why:   The public side of NoteMe is plain static hosting; the API only writes
       the document and pings the deploy hook, which re-runs this build.
How:   Fetch the document (JSONBin or local data.json), then write:
         - index.html       users in creation order, latest-note preview
         - <user_id>.html   one page per user, notes newest first
         - every file from public/ (admin.html and friends), copied as-is

Read-only: the builder never writes to the document store.

Fetch retries:
    Unlike API requests, a build is a batch job that may start right after
    the deploy hook fires. Transient StoreUnavailableError failures are
    retried with tenacity (exponential backoff + jitter, bounded attempts).
"""

import html
import logging
import shutil
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional
from urllib.parse import quote

import aiofiles
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from noteme.exceptions import StoreUnavailableError
from noteme.schemas.document import Document, Note, User
from noteme.services.notes_service import LOGIN_PATTERN
from noteme.services.store_base import DocumentStore
from noteme.site import templates

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 80


@dataclass
class BuildResult:
    """Files produced by one build, relative to the output directory."""

    pages: List[str] = field(default_factory=list)
    copied: List[str] = field(default_factory=list)
    skipped_users: List[str] = field(default_factory=list)


def format_date(value: datetime) -> str:
    """DD.MM.YYYY HH:MM in UTC; naive timestamps are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%d.%m.%Y %H:%M")


def newest_first(notes: List[Note]) -> List[Note]:
    return sorted(notes, key=lambda n: n.created_at, reverse=True)


def preview_text(text: str) -> str:
    if len(text) > PREVIEW_LENGTH:
        return text[:PREVIEW_LENGTH] + "..."
    return text


class SiteBuilder:
    """
    Renders a Document to HTML files.

    Args:
        store:          Source of the document
        dist_dir:       Output directory (created if missing)
        public_dir:     Directory whose files are copied into dist_dir
        language:       Page language (en, ru)
        fetch_attempts: Total fetch attempts before giving up
        min_wait / max_wait: Backoff bounds in seconds between attempts
    """

    def __init__(
        self,
        store: DocumentStore,
        dist_dir: str,
        public_dir: Optional[str] = None,
        language: str = "en",
        fetch_attempts: int = 3,
        min_wait: float = 1,
        max_wait: float = 8,
    ):
        self.store = store
        self.dist_dir = Path(dist_dir)
        self.public_dir = Path(public_dir) if public_dir else None
        self.language = language
        self.strings = templates.STRINGS.get(language, templates.STRINGS["en"])
        self.fetch_attempts = fetch_attempts
        self.min_wait = min_wait
        self.max_wait = max_wait

    async def fetch_document(self) -> Document:
        """
        Read the document, retrying StoreUnavailableError.

        Raises:
            StoreUnavailableError: still failing after `fetch_attempts` tries.
        """
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(StoreUnavailableError),
            stop=stop_after_attempt(self.fetch_attempts),
            wait=wait_exponential_jitter(initial=self.min_wait, max=self.max_wait, jitter=1),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                return await self.store.read()

    async def build(self) -> BuildResult:
        """Fetch the document and write every page. Returns what was produced."""
        logger.info("Building site from %s store into %s", self.store.name, self.dist_dir)
        document = await self.fetch_document()

        self.dist_dir.mkdir(parents=True, exist_ok=True)
        result = BuildResult()

        publishable = []
        for user in document.users:
            # Hand-edited documents could hold ids that are unsafe as file names
            if LOGIN_PATTERN.fullmatch(user.id):
                publishable.append(user)
            else:
                logger.warning("Skipping user with invalid id: %r", user.id)
                result.skipped_users.append(user.id)

        await self._write("index.html", self.render_index(publishable))
        result.pages.append("index.html")

        for user in publishable:
            name = f"{user.id}.html"
            await self._write(name, self.render_user_page(user))
            result.pages.append(name)

        result.copied = self.copy_public()

        logger.info(
            "Build complete: %d pages, %d static files",
            len(result.pages),
            len(result.copied),
        )
        return result

    # ── Rendering ─────────────────────────────────────────────────────────

    def _page(self, title: str, description: str, body: str) -> str:
        return templates.PAGE.substitute(
            lang=self.language,
            title=html.escape(title),
            description=html.escape(description),
            styles=templates.COMMON_STYLES,
            body=body,
        )

    def render_index(self, users: List[User]) -> str:
        s = self.strings
        cards = []
        for user in users:
            notes = newest_first(user.notes)
            latest = notes[0] if notes else None
            preview = preview_text(latest.text) if latest else s["no_notes_preview"]
            count = s["note_count"].format(count=len(user.notes))
            meta = f"{format_date(latest.created_at)} · {count}" if latest else count
            cards.append(
                templates.USER_CARD.substitute(
                    user_id=html.escape(user.id),
                    preview=html.escape(preview),
                    meta=html.escape(meta),
                )
            )

        if not cards:
            cards.append(templates.EMPTY_BLOCK.substitute(message=html.escape(s["index_empty"])))

        body = templates.INDEX_BODY.substitute(
            heading=html.escape(s["index_heading"]),
            new_label=html.escape(s["new_label"]),
            cards="\n".join(cards),
        )
        return self._page(s["index_title"], s["index_description"], body)

    def render_user_page(self, user: User) -> str:
        s = self.strings
        blocks = [
            templates.NOTE_BLOCK.substitute(
                text=html.escape(note.text),
                date=format_date(note.created_at),
            )
            for note in newest_first(user.notes)
        ]
        if not blocks:
            blocks.append(templates.EMPTY_BLOCK.substitute(message=html.escape(s["user_empty"])))

        body = templates.USER_BODY.substitute(
            back_label=html.escape(s["back_label"]),
            add_label=html.escape(s["add_label"]),
            user_id=html.escape(user.id),
            user_query=quote(user.id),
            notes="\n".join(blocks),
        )
        return self._page(
            s["user_title"].format(user_id=user.id),
            s["user_description"].format(user_id=user.id),
            body,
        )

    # ── Output ────────────────────────────────────────────────────────────

    async def _write(self, name: str, content: str) -> None:
        async with aiofiles.open(self.dist_dir / name, "w", encoding="utf-8") as f:
            await f.write(content)
        logger.info("Generated: %s", name)

    def copy_public(self) -> List[str]:
        """Copy top-level files from public_dir into dist_dir. Missing dir → nothing."""
        if self.public_dir is None or not self.public_dir.is_dir():
            return []
        copied = []
        for path in sorted(self.public_dir.iterdir()):
            if path.is_file():
                shutil.copyfile(path, self.dist_dir / path.name)
                copied.append(path.name)
                logger.info("Copied: %s", path.name)
        return copied
