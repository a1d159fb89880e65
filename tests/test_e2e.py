"""End-to-end pipeline check.

Runs the scheduler with both cadences against a mocked inventory and a
recording sink, and confirms records flow with the expected shape.
"""

from __future__ import annotations

import asyncio
import functools
import json

import pytest

from conftest import FakeSink
from vmstats.sampler import sample_datastores, sample_hosts_and_vms
from vmstats.scheduler import Cadence, Scheduler


def _scheduler(client, sink, tag, api_timeout: float = 1.0) -> Scheduler:
    return Scheduler(
        [
            Cadence("datastores", 0.15, functools.partial(sample_datastores, client, sink, tag)),
            Cadence("hosts_and_vms", 0.05, functools.partial(sample_hosts_and_vms, client, sink, tag)),
        ],
        api_timeout=api_timeout,
    )


@pytest.mark.asyncio
async def test_full_pipeline(client, sink, tag):
    scheduler = _scheduler(client, sink, tag)
    await scheduler.start()
    await asyncio.sleep(0.4)
    await scheduler.stop()

    records = [json.loads(payload) for _, _, payload in sink.writes]
    types = {r["Type"] for r in records}
    assert types == {"datastore", "host", "guest"}

    for r in records:
        assert r["Name"]
        if r["Type"] == "datastore":
            assert {"Capacity", "Free", "Uncommitted", "Accessible", "DatastoreType", "Usage"} <= set(r)
        else:
            assert {"PowerState", "Boot", "Cores", "Mhz", "Usage", "UsageTotal",
                    "Total", "Used", "Percentage"} <= set(r)
            # CPU totals always line up with clock rate and core count
            assert r["UsageTotal"] == r["Mhz"] * r["Cores"]

    for ts, _, _ in sink.writes:
        assert ts.microsecond == 0


@pytest.mark.asyncio
async def test_pipeline_survives_sink_failures(client, tag):
    sink = FakeSink(fail_on=1)
    scheduler = _scheduler(client, sink, tag)
    await scheduler.start()
    await asyncio.sleep(0.3)
    await scheduler.stop()

    # the first write failed, later ticks still delivered records
    assert sink.attempts > 1
    assert sink.writes
