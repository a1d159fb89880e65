from .client import InventoryClient
from .mapping import map_datastore, map_host, map_vm, moref_id, resolve_clock_rate

__all__ = [
    "InventoryClient",
    "map_datastore",
    "map_host",
    "map_vm",
    "moref_id",
    "resolve_clock_rate",
]
