from .base import Sink, Tag
from .http_sink import HttpSink

__all__ = ["HttpSink", "Sink", "Tag"]
