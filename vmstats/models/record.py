from __future__ import annotations

import json
from enum import StrEnum
from typing import Any

from pydantic import BaseModel

from vmstats.errors import MappingError


class RecordType(StrEnum):
    DATASTORE = "datastore"
    HOST = "host"
    GUEST = "guest"


def flatten(kind: RecordType, name: str, sample: BaseModel) -> dict[str, Any]:
    """Merge ``sample`` and its nested CPU/memory samples under Type and Name."""
    record: dict[str, Any] = {"Type": str(kind), "Name": name}
    for key, value in sample.model_dump(by_alias=True).items():
        if isinstance(value, dict):
            record.update(value)
        else:
            record[key] = value
    return record


def encode_record(kind: RecordType, name: str, sample: BaseModel) -> bytes:
    try:
        return json.dumps(flatten(kind, name, sample), allow_nan=False).encode()
    except (TypeError, ValueError) as exc:
        raise MappingError(f"failed to encode {kind} {name!r}: {exc}") from exc
