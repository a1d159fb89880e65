from __future__ import annotations

import math

from pydantic import BaseModel, ConfigDict, Field

MIB = 1024 * 1024


def tenth_percent(part: int, whole: int) -> float:
    """Return ``part / whole`` as a percentage rounded to the nearest tenth.

    Halves round away from zero. A zero ``whole`` yields ``0.0``.
    """
    if whole == 0:
        return 0.0
    ratio = part * 1000 / whole
    return math.copysign(math.floor(abs(ratio) + 0.5), ratio) / 10.0


class CpuSample(BaseModel):
    model_config = ConfigDict(frozen=True)

    cores: int = Field(default=0, serialization_alias="Cores")
    clock_rate_mhz: int = Field(default=0, serialization_alias="Mhz")
    usage_percent: float = Field(default=0.0, serialization_alias="Usage")
    usage_total_mhz: int = Field(default=0, serialization_alias="UsageTotal")


class MemorySample(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_bytes: int = Field(default=0, serialization_alias="Total")
    used_bytes: int = Field(default=0, serialization_alias="Used")
    usage_percent: float = Field(default=0.0, serialization_alias="Percentage")


class Host(BaseModel):
    """Physical host snapshot. ``id`` is the managed-object id used to join VMs."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default="", exclude=True)
    power_state: str = Field(default="", serialization_alias="PowerState")
    boot_epoch_seconds: int = Field(default=0, serialization_alias="Boot")
    cpu: CpuSample = Field(default_factory=CpuSample)
    memory: MemorySample = Field(default_factory=MemorySample)


class VM(BaseModel):
    """Guest snapshot. Its clock rate is borrowed from the host it runs on."""

    model_config = ConfigDict(frozen=True)

    power_state: str = Field(default="", serialization_alias="PowerState")
    boot_epoch_seconds: int = Field(default=0, serialization_alias="Boot")
    memory_overhead_bytes: int = Field(default=0, serialization_alias="MemoryOverhead")
    cpu: CpuSample = Field(default_factory=CpuSample)
    memory: MemorySample = Field(default_factory=MemorySample)


class Datastore(BaseModel):
    model_config = ConfigDict(frozen=True)

    capacity_bytes: int = Field(default=0, serialization_alias="Capacity")
    free_bytes: int = Field(default=0, serialization_alias="Free")
    uncommitted_bytes: int = Field(default=0, serialization_alias="Uncommitted")
    accessible: bool = Field(default=False, serialization_alias="Accessible")
    type: str = Field(default="", serialization_alias="DatastoreType")
    usage_percent: float = Field(default=0.0, serialization_alias="Usage")


# ── constructors ────────────────────────────────────────


def cpu_sample(cores: int, clock_rate_mhz: int, usage_mhz: int) -> CpuSample:
    """Build a CpuSample; usage is 0 when the core/clock product is 0."""
    total = clock_rate_mhz * cores
    return CpuSample(
        cores=cores,
        clock_rate_mhz=clock_rate_mhz,
        usage_percent=tenth_percent(usage_mhz, total),
        usage_total_mhz=total,
    )


def memory_sample(total_bytes: int, used_bytes: int) -> MemorySample:
    return MemorySample(
        total_bytes=total_bytes,
        used_bytes=used_bytes,
        usage_percent=tenth_percent(used_bytes, total_bytes),
    )


def datastore_usage(capacity: int, free: int, uncommitted: int) -> float:
    """Percent of capacity used, counting uncommitted space as reserved."""
    used = capacity - (free + uncommitted)
    if used <= 0:
        return 0.0
    return tenth_percent(used, capacity)
