"""Map pyVmomi summary objects onto the canonical sample types.

Quick-stats are pre-aggregated by the server, so the only work done here is
unit normalization (MiB to bytes) and percentage rounding. Optional counters
the API leaves unset count as zero.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping

from vmstats.models import (
    MIB,
    VM,
    Datastore,
    Host,
    cpu_sample,
    datastore_usage,
    memory_sample,
)


def _int(value: Any) -> int:
    return int(value) if value is not None else 0


def _get(obj: Any, name: str) -> Any:
    """Read ``name`` from a summary sub-object the API may leave unset."""
    return getattr(obj, name, None) if obj is not None else None


def _epoch(boot_time: datetime | None) -> int:
    return int(boot_time.timestamp()) if boot_time is not None else 0


def moref_id(ref: Any) -> str:
    """Return the managed-object id of a pyVmomi reference, or ``""``."""
    if ref is None:
        return ""
    return getattr(ref, "_moId", "") or ""


def map_host(summary: Any) -> tuple[str, Host]:
    # hardware is unset for disconnected or not-responding hosts
    hardware = summary.hardware
    stats = summary.quickStats
    runtime = summary.runtime
    cpu = cpu_sample(
        cores=_int(_get(hardware, "numCpuCores")),
        clock_rate_mhz=_int(_get(hardware, "cpuMhz")),
        usage_mhz=_int(_get(stats, "overallCpuUsage")),
    )
    memory = memory_sample(
        total_bytes=_int(_get(hardware, "memorySize")),
        used_bytes=_int(_get(stats, "overallMemoryUsage")) * MIB,
    )
    host_id = moref_id(summary.host)
    host = Host(
        id=host_id,
        power_state=str(_get(runtime, "powerState") or ""),
        boot_epoch_seconds=_epoch(_get(runtime, "bootTime")),
        cpu=cpu,
        memory=memory,
    )
    return _get(summary.config, "name") or host_id, host


def resolve_clock_rate(host_id: str, hosts: Mapping[str, Host]) -> int:
    """Clock rate of the first host whose id matches, 0 when none does."""
    if not host_id:
        return 0
    for host in hosts.values():
        if host.id == host_id:
            return host.cpu.clock_rate_mhz
    return 0


def map_vm(summary: Any, hosts: Mapping[str, Host]) -> tuple[str, VM]:
    config = summary.config
    runtime = summary.runtime
    stats = summary.quickStats
    cpu = cpu_sample(
        cores=_int(_get(config, "numCpu")),
        clock_rate_mhz=resolve_clock_rate(moref_id(_get(runtime, "host")), hosts),
        usage_mhz=_int(_get(stats, "overallCpuUsage")),
    )
    memory = memory_sample(
        total_bytes=_int(_get(config, "memorySizeMB")) * MIB,
        used_bytes=_int(_get(stats, "guestMemoryUsage")) * MIB,
    )
    vm = VM(
        power_state=str(_get(runtime, "powerState") or ""),
        boot_epoch_seconds=_epoch(_get(runtime, "bootTime")),
        memory_overhead_bytes=_int(_get(runtime, "memoryOverhead")),
        cpu=cpu,
        memory=memory,
    )
    return _get(config, "name") or moref_id(_get(summary, "vm")), vm


def map_datastore(summary: Any) -> tuple[str, Datastore]:
    capacity = _int(summary.capacity)
    free = _int(summary.freeSpace)
    uncommitted = _int(summary.uncommitted)
    datastore = Datastore(
        capacity_bytes=capacity,
        free_bytes=free,
        uncommitted_bytes=uncommitted,
        accessible=bool(summary.accessible),
        type=summary.type or "",
        usage_percent=datastore_usage(capacity, free, uncommitted),
    )
    return summary.name, datastore
