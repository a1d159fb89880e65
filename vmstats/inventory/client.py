from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Mapping

from pyVim.connect import Disconnect, SmartConnect
from pyVmomi import vim, vmodl

from vmstats.errors import ConfigError, QueryError, SessionError
from vmstats.inventory.mapping import map_datastore, map_host, map_vm
from vmstats.models import VM, Datastore, Host

logger = logging.getLogger(__name__)

_SUMMARY = ["summary"]


class InventoryClient:
    """Queries a vSphere endpoint and maps its inventory onto sample types.

    pyVmomi is blocking, so each retrieval runs in a worker thread. The
    session handle is only read from, so one client serves both cadences.
    At most one retrieval is in flight: a call abandoned at its deadline
    keeps its thread until the transport timeout ends it, and ticks that
    arrive meanwhile fail fast with QueryError instead of stacking threads.
    """

    def __init__(self, service_instance: Any, host: str = "") -> None:
        self._si = service_instance
        self.host = host
        self._busy = threading.Lock()

    # ── lifecycle ────────────────────────────────────────

    @classmethod
    async def connect(
        cls,
        host: str,
        username: str,
        password: str,
        insecure: bool = True,
        connection_timeout: float | None = None,
    ) -> InventoryClient:
        if not host:
            raise ConfigError("missing host")
        if not username:
            raise ConfigError("missing username")
        if not password:
            raise ConfigError("missing password")
        try:
            si = await asyncio.to_thread(
                SmartConnect,
                host=host,
                user=username,
                pwd=password,
                disableSslCertValidation=insecure,
                httpConnectionTimeout=connection_timeout,
            )
        except (vmodl.MethodFault, OSError) as exc:
            raise SessionError(f"failed to log in to {host}: {_describe(exc)}") from exc
        logger.info("Connected to vSphere endpoint %s", host)
        return cls(si, host=host)

    async def close(self) -> None:
        try:
            await asyncio.to_thread(Disconnect, self._si)
        except (vmodl.MethodFault, OSError):
            logger.warning("Logout from %s failed", self.host, exc_info=True)
        else:
            logger.info("Logged out of vSphere endpoint %s", self.host)

    # ── inventory ───────────────────────────────────────

    async def fetch_hosts(self) -> dict[str, Host]:
        hosts: dict[str, Host] = {}
        for props in await asyncio.to_thread(self._retrieve, "HostSystem", _SUMMARY):
            if "summary" in props:
                name, host = map_host(props["summary"])
                hosts[name] = host
        return hosts

    async def fetch_datastores(self) -> dict[str, Datastore]:
        datastores: dict[str, Datastore] = {}
        for props in await asyncio.to_thread(self._retrieve, "Datastore", _SUMMARY):
            if "summary" in props:
                name, datastore = map_datastore(props["summary"])
                datastores[name] = datastore
        return datastores

    async def fetch_vms(self, hosts: Mapping[str, Host]) -> dict[str, VM]:
        vms: dict[str, VM] = {}
        for props in await asyncio.to_thread(self._retrieve, "VirtualMachine", _SUMMARY):
            if "summary" in props:
                name, vm = map_vm(props["summary"], hosts)
                vms[name] = vm
        return vms

    # ── internals ───────────────────────────────────────

    def _retrieve(self, kind: str, paths: list[str]) -> list[dict[str, Any]]:
        if not self._busy.acquire(blocking=False):
            raise QueryError(f"previous retrieval still running, skipped {kind}")
        try:
            return self._collect(kind, paths)
        finally:
            self._busy.release()

    def _collect(self, kind: str, paths: list[str]) -> list[dict[str, Any]]:
        """Fetch ``paths`` for every ``kind`` object below the root folder.

        Uses one recursive ContainerView and a paginated RetrievePropertiesEx.
        Returns one ``{property: value}`` dict per object.
        """
        managed_type = getattr(vim, kind)
        content = self._si.RetrieveContent()
        view = None
        objects: list[Any] = []
        try:
            view = content.viewManager.CreateContainerView(
                container=content.rootFolder,
                type=[managed_type],
                recursive=True,
            )
            filter_spec = vim.PropertyCollector.FilterSpec(
                objectSet=[
                    vim.PropertyCollector.ObjectSpec(
                        obj=view,
                        skip=True,
                        selectSet=[
                            vim.PropertyCollector.TraversalSpec(
                                name="traverseView",
                                type=vim.view.ContainerView,
                                path="view",
                                skip=False,
                            )
                        ],
                    )
                ],
                propSet=[
                    vim.PropertyCollector.PropertySpec(
                        type=managed_type,
                        pathSet=paths,
                        all=False,
                    )
                ],
            )
            collector = content.propertyCollector
            result = collector.RetrievePropertiesEx(
                specSet=[filter_spec],
                options=vim.PropertyCollector.RetrieveOptions(),
            )
            while result is not None:
                objects.extend(result.objects or [])
                if not result.token:
                    break
                result = collector.ContinueRetrievePropertiesEx(token=result.token)
        except vmodl.MethodFault as exc:
            raise QueryError(f"failed to retrieve {kind}: {_describe(exc)}") from exc
        finally:
            if view is not None:
                try:
                    view.Destroy()
                except vmodl.MethodFault:
                    logger.warning("Failed to destroy %s container view", kind, exc_info=True)

        logger.debug("Retrieved %d %s objects", len(objects), kind)
        return [{p.name: p.val for p in (oc.propSet or [])} for oc in objects]


def _describe(exc: BaseException) -> str:
    return getattr(exc, "msg", None) or str(exc) or type(exc).__name__
