from __future__ import annotations

from datetime import datetime
from typing import Protocol

from pydantic import BaseModel, ConfigDict


class Tag(BaseModel):
    """Handle for a tag the sink has been configured to accept."""

    model_config = ConfigDict(frozen=True)

    name: str


class Sink(Protocol):
    """Destination for encoded records."""

    async def wait_until_ready(self, timeout: float, min_destinations: int = 1) -> None:
        """Block until enough destinations are reachable; SessionError on timeout."""
        ...

    def resolve_tag(self, name: str) -> Tag:
        """Return the handle for ``name``; TagNotFoundError if unconfigured."""
        ...

    async def write(self, timestamp: datetime, tag: Tag, payload: bytes) -> None:
        """Send one record; WriteError if the sink rejects it."""
        ...

    async def close(self) -> None: ...
