"""Command-line entry point.

Usage:
    vmstats --host vcenter.example.com --username svc --password ... \\
        --ingest-target ingest.example.com:8080 --ingest-secret ... \\
        --ingest-tag vmware

Every flag falls back to its ``VMSTATS_*`` environment variable.
"""

from __future__ import annotations

import argparse
import asyncio
import functools
import logging
import sys

from pydantic import ValidationError

from vmstats.config import Settings
from vmstats.errors import ConfigError, SessionError, TagNotFoundError
from vmstats.inventory import InventoryClient
from vmstats.sampler import sample_datastores, sample_hosts_and_vms
from vmstats.scheduler import Cadence, Scheduler
from vmstats.sink import HttpSink, Sink, Tag

logger = logging.getLogger("vmstats")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="vmstats",
        description="Sample vSphere host, VM and datastore stats into a telemetry sink",
    )
    parser.add_argument("--host", help="vSphere host")
    parser.add_argument("--username", help="vSphere username")
    parser.add_argument("--password", help="vSphere password")
    parser.add_argument("--ingest-target", help="sink destination address")
    parser.add_argument("--ingest-secret", help="sink ingest secret")
    parser.add_argument("--ingest-tag", help="tag applied to every record")
    parser.add_argument("--datastore-interval", type=float, help="seconds between datastore samples")
    parser.add_argument("--runtime-interval", type=float, help="seconds between host/VM samples")
    parser.add_argument("--api-timeout", type=float, help="deadline for one sampling call")
    parser.add_argument("--log-level", help="logging level (default INFO)")
    return parser.parse_args(argv)


def load_settings(args: argparse.Namespace) -> Settings:
    overrides = {k: v for k, v in vars(args).items() if v is not None}
    try:
        settings = Settings(**overrides)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
    settings.require()
    return settings


def build_scheduler(
    settings: Settings, client: InventoryClient, sink: Sink, tag: Tag
) -> Scheduler:
    return Scheduler(
        [
            Cadence(
                "datastores",
                settings.datastore_interval,
                functools.partial(sample_datastores, client, sink, tag),
            ),
            Cadence(
                "hosts_and_vms",
                settings.runtime_interval,
                functools.partial(sample_hosts_and_vms, client, sink, tag),
            ),
        ],
        api_timeout=settings.api_timeout,
    )


async def run(settings: Settings) -> None:
    sink = HttpSink(
        settings.ingest_target,
        settings.ingest_secret,
        tags=[settings.ingest_tag],
        ingester_name=settings.ingester_name,
    )
    try:
        await sink.wait_until_ready(settings.ready_timeout)
        tag = sink.resolve_tag(settings.ingest_tag)
        client = await InventoryClient.connect(
            settings.host,
            settings.username,
            settings.password,
            insecure=settings.insecure,
            connection_timeout=settings.api_timeout,
        )
        try:
            await build_scheduler(settings, client, sink, tag).run()
        finally:
            await client.close()
    finally:
        await sink.close()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=(args.log_level or "INFO").upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    try:
        settings = load_settings(args)
    except ConfigError as exc:
        logger.critical("Invalid configuration: %s", exc)
        return 1
    logging.getLogger().setLevel(settings.log_level.upper())

    try:
        asyncio.run(run(settings))
    except (SessionError, TagNotFoundError) as exc:
        logger.critical("Startup failed: %s", exc)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    return 0


if __name__ == "__main__":
    sys.exit(main())
