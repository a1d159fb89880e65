from __future__ import annotations

import asyncio
import logging
from datetime import datetime

import httpx

from vmstats.errors import SessionError, TagNotFoundError, WriteError
from vmstats.sink.base import Tag

logger = logging.getLogger(__name__)


class HttpSink:
    """Sink that POSTs each record to a single HTTP ingest destination.

    The tag, capture timestamp and ingester name travel as headers and the
    ingest secret as a bearer token. The record bytes are the request body.
    """

    def __init__(
        self,
        target: str,
        secret: str,
        tags: list[str],
        ingester_name: str = "Vmware Stats",
        poll_interval: float = 0.5,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        base_url = target if "://" in target else f"http://{target}"
        self.target = base_url
        self.tags = {name: Tag(name=name) for name in tags}
        self.poll_interval = poll_interval
        self._client = client or httpx.AsyncClient(base_url=base_url)
        # sent per request so a caller-supplied client is left untouched
        self._headers = {
            "Authorization": f"Bearer {secret}",
            "X-Ingester-Name": ingester_name,
        }

    # ── readiness ───────────────────────────────────────

    async def wait_until_ready(self, timeout: float, min_destinations: int = 1) -> None:
        if min_destinations > 1:
            raise SessionError(
                f"{min_destinations} destinations requested, only one is configured"
            )
        try:
            async with asyncio.timeout(timeout):
                while not await self._reachable():
                    await asyncio.sleep(self.poll_interval)
        except TimeoutError as exc:
            raise SessionError(
                f"timed out after {timeout:.1f}s waiting for {self.target}"
            ) from exc
        logger.info("Sink destination %s is reachable", self.target)

    async def _reachable(self) -> bool:
        try:
            await self._client.head("/", headers=self._headers)
        except httpx.TransportError as exc:
            logger.debug("Sink %s not reachable yet: %s", self.target, exc)
            return False
        return True

    # ── writes ──────────────────────────────────────────

    def resolve_tag(self, name: str) -> Tag:
        try:
            return self.tags[name]
        except KeyError:
            raise TagNotFoundError(f"tag {name!r} is not configured") from None

    async def write(self, timestamp: datetime, tag: Tag, payload: bytes) -> None:
        headers = {
            **self._headers,
            "Content-Type": "application/json",
            "X-Ingest-Tag": tag.name,
            "X-Ingest-Timestamp": timestamp.isoformat(),
        }
        try:
            response = await self._client.post("/", content=payload, headers=headers)
        except httpx.HTTPError as exc:
            raise WriteError(f"write to {self.target} failed: {exc}") from exc
        if response.status_code >= 400:
            raise WriteError(
                f"write to {self.target} rejected with HTTP {response.status_code}"
            )

    async def close(self) -> None:
        await self._client.aclose()
