"""
NoteMe Backend — Deploy Hook Notifier
======================================

What:  Tells the hosting platform to rebuild the static site after a mutation.
Why:   The public pages are generated from the document at build time; a new
       user or note only shows up after a rebuild.
How:   POST (empty body) to the configured deploy hook URL with httpx.
Who:   Called by NotesService after every successful store write.

Best-effort contract:
    A failing hook (transport error, non-2xx) is logged at WARNING and
    swallowed. The mutation is already durable in the store, and the caller
    must not see an error for a stale static page.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from noteme.config import settings

logger = logging.getLogger(__name__)


class DeployNotifier(ABC):
    """Injected into NotesService; called once per successful mutation."""

    @abstractmethod
    async def notify(self, event: str) -> None:
        """
        Signal that the document changed.

        Args:
            event: Action that caused the change (createUser / addNote), for logs.

        Never raises.
        """
        ...

    async def aclose(self) -> None:
        return None


class NullDeployNotifier(DeployNotifier):
    """Used when no DEPLOY_HOOK_URL is configured."""

    async def notify(self, event: str) -> None:
        return None


class WebhookDeployNotifier(DeployNotifier):
    """POSTs to a deploy hook URL (e.g. a Vercel deploy hook)."""

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.url = url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def notify(self, event: str) -> None:
        try:
            response = await self._client.post(self.url)
        except httpx.HTTPError as e:
            logger.warning(
                "Deploy hook failed after %s: %s: %s", event, type(e).__name__, str(e)
            )
            return

        if not response.is_success:
            logger.warning(
                "Deploy hook returned %d after %s", response.status_code, event
            )
            return

        logger.info("Deploy hook triggered after %s", event)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def deploy_notifier_from_settings(client: Optional[httpx.AsyncClient] = None) -> DeployNotifier:
    """WebhookDeployNotifier when DEPLOY_HOOK_URL is set, otherwise a no-op."""
    if settings.deploy_hook_url:
        return WebhookDeployNotifier(
            url=settings.deploy_hook_url,
            timeout=settings.store_timeout_seconds,
            client=client,
        )
    return NullDeployNotifier()
