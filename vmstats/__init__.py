"""Polls a vSphere endpoint and forwards normalized host, VM and datastore samples."""

__version__ = "0.1.0"
