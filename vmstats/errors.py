from __future__ import annotations


class VmStatsError(Exception):
    """Base class for every error raised by vmstats."""


class ConfigError(VmStatsError):
    """A required setting is missing or blank."""


class SessionError(VmStatsError):
    """The vSphere session or the sink could not be established."""


class QueryError(VmStatsError):
    """An inventory view or property retrieval failed."""


class MappingError(VmStatsError):
    """A record could not be encoded."""


class WriteError(VmStatsError):
    """The sink rejected a record."""


class TagNotFoundError(WriteError):
    """The requested tag is not configured on the sink."""
