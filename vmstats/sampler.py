"""Fetch one inventory snapshot and emit a flat record per entity.

Every record in a batch shares one capture timestamp truncated to whole
seconds. Records are written one at a time in inventory order and the first
fetch, encoding or write failure aborts the rest of the batch.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Mapping

from pydantic import BaseModel

from vmstats.inventory import InventoryClient
from vmstats.models import RecordType, encode_record
from vmstats.sink import Sink, Tag

logger = logging.getLogger(__name__)


def truncated_now() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


async def _emit(
    sink: Sink,
    tag: Tag,
    kind: RecordType,
    samples: Mapping[str, BaseModel],
) -> int:
    ts = truncated_now()
    written = 0
    for name, sample in samples.items():
        await sink.write(ts, tag, encode_record(kind, name, sample))
        written += 1
    logger.debug("Wrote %d %s records stamped %s", written, kind, ts.isoformat())
    return written


async def sample_datastores(client: InventoryClient, sink: Sink, tag: Tag) -> int:
    datastores = await client.fetch_datastores()
    return await _emit(sink, tag, RecordType.DATASTORE, datastores)


async def sample_hosts_and_vms(client: InventoryClient, sink: Sink, tag: Tag) -> int:
    """Emit host records, then VM records under a fresh timestamp.

    The hosts fetched first supply the clock rates VM CPU usage is computed
    against.
    """
    hosts = await client.fetch_hosts()
    written = await _emit(sink, tag, RecordType.HOST, hosts)

    vms = await client.fetch_vms(hosts)
    written += await _emit(sink, tag, RecordType.GUEST, vms)
    return written
