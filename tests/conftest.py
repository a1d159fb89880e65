"""Shared fakes: pyVmomi-shaped summaries, an inventory client and a sink."""

from __future__ import annotations

from datetime import datetime
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from vmstats.errors import WriteError
from vmstats.inventory import InventoryClient
from vmstats.sink import Tag

GIB = 1024 * 1024 * 1024


def host_summary(
    name: str = "esx01",
    moid: str = "host-1",
    cores: int = 8,
    mhz: int = 2400,
    cpu_usage: int = 9600,
    memory_size: int = 64 * GIB,
    memory_usage_mb: int = 32768,
    power_state: str = "poweredOn",
    boot_time: datetime | None = None,
) -> SimpleNamespace:
    return SimpleNamespace(
        host=SimpleNamespace(_moId=moid),
        hardware=SimpleNamespace(numCpuCores=cores, cpuMhz=mhz, memorySize=memory_size),
        quickStats=SimpleNamespace(
            overallCpuUsage=cpu_usage, overallMemoryUsage=memory_usage_mb
        ),
        runtime=SimpleNamespace(powerState=power_state, bootTime=boot_time),
        config=SimpleNamespace(name=name),
    )


def vm_summary(
    name: str = "web01",
    host_moid: str | None = "host-1",
    num_cpu: int = 2,
    memory_mb: int = 4096,
    cpu_usage: int = 1200,
    guest_memory_mb: int = 1024,
    overhead: int | None = 50 * 1024 * 1024,
    power_state: str = "poweredOn",
    boot_time: datetime | None = None,
) -> SimpleNamespace:
    host = SimpleNamespace(_moId=host_moid) if host_moid is not None else None
    return SimpleNamespace(
        config=SimpleNamespace(name=name, numCpu=num_cpu, memorySizeMB=memory_mb),
        runtime=SimpleNamespace(
            host=host,
            powerState=power_state,
            bootTime=boot_time,
            memoryOverhead=overhead,
        ),
        quickStats=SimpleNamespace(
            overallCpuUsage=cpu_usage, guestMemoryUsage=guest_memory_mb
        ),
    )


def datastore_summary(
    name: str = "ds01",
    capacity: int = 1000,
    free: int = 300,
    uncommitted: int | None = 0,
    accessible: bool = True,
    type: str = "VMFS",
) -> SimpleNamespace:
    return SimpleNamespace(
        name=name,
        capacity=capacity,
        freeSpace=free,
        uncommitted=uncommitted,
        accessible=accessible,
        type=type,
    )


class FakeSink:
    """Records writes; optionally fails on the Nth write (1-based)."""

    def __init__(self, fail_on: int | None = None) -> None:
        self.fail_on = fail_on
        self.attempts = 0
        self.writes: list[tuple[datetime, Tag, bytes]] = []
        self.closed = False

    async def wait_until_ready(self, timeout: float, min_destinations: int = 1) -> None:
        return None

    def resolve_tag(self, name: str) -> Tag:
        return Tag(name=name)

    async def write(self, timestamp: datetime, tag: Tag, payload: bytes) -> None:
        self.attempts += 1
        if self.fail_on is not None and self.attempts == self.fail_on:
            raise WriteError("sink rejected record")
        self.writes.append((timestamp, tag, payload))

    async def close(self) -> None:
        self.closed = True


# ── fixtures ───────────────────────────────────────────


@pytest.fixture
def tag() -> Tag:
    return Tag(name="vmware")


@pytest.fixture
def sink() -> FakeSink:
    return FakeSink()


@pytest.fixture
def inventory() -> dict[str, list]:
    """Summaries keyed by managed type, as the endpoint would return them."""
    return {
        "HostSystem": [
            host_summary("esx01", moid="host-1", mhz=2400),
            host_summary("esx02", moid="host-2", mhz=3000, cpu_usage=6000),
        ],
        "VirtualMachine": [
            vm_summary("web01", host_moid="host-1"),
            vm_summary("db01", host_moid="host-2", num_cpu=4, cpu_usage=6000),
        ],
        "Datastore": [
            datastore_summary("ds01"),
            datastore_summary("ds02", capacity=2000, free=500, uncommitted=500, type="NFS"),
        ],
    }


@pytest.fixture
def client(inventory):
    """InventoryClient whose property retrieval is served from ``inventory``."""
    cli = InventoryClient(MagicMock(), host="vcenter.test")

    def _retrieve(kind: str, paths: list[str]) -> list[dict]:
        return [{"summary": s} for s in inventory[kind]]

    with patch.object(cli, "_retrieve", side_effect=_retrieve):
        yield cli
