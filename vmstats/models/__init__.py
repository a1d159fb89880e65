from .record import RecordType, encode_record, flatten
from .samples import (
    MIB,
    VM,
    CpuSample,
    Datastore,
    Host,
    MemorySample,
    cpu_sample,
    datastore_usage,
    memory_sample,
    tenth_percent,
)

__all__ = [
    "MIB",
    "VM",
    "CpuSample",
    "Datastore",
    "Host",
    "MemorySample",
    "RecordType",
    "cpu_sample",
    "datastore_usage",
    "encode_record",
    "flatten",
    "memory_sample",
    "tenth_percent",
]
