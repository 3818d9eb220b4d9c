"""Backend for a JSON-over-HTTP hypervisor management gateway."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

import aiohttp
from pydantic import ValidationError

from guest_harness.errors import (
    DependencyUnavailable,
    VmNotFoundError,
    VmStartError,
)
from guest_harness.hypervisors.base import HypervisorProvider
from guest_harness.hypervisors.http.config import HttpGatewayConfig
from guest_harness.hypervisors.http.models import MemoryPayload, VmPayload
from guest_harness.models.vm import MemoryCounters, VmInfo

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class HttpGatewayProvider(HypervisorProvider):
    """Management gateway backend.

    Endpoints, relative to ``api_base_url``:
    - GET hosts/:server/vms/:name for identity and state
    - GET hosts/:server/vms/:name/memory for Dynamic Memory counters
    - POST hosts/:server/vms/:name/{start,stop,save} for lifecycle actions
    """

    config: HttpGatewayConfig
    session: aiohttp.ClientSession = field(repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: HttpGatewayConfig
    ) -> AsyncGenerator["HttpGatewayProvider", None]:
        """Create provider with managed session lifecycle."""
        async with aiohttp.ClientSession(
            base_url=config.api_base_url,
            headers={
                "Authorization": f"Bearer {config.api_token.get_secret_value()}",
                "Accept": "application/json",
            },
            timeout=aiohttp.ClientTimeout(total=config.request_timeout),
        ) as session:
            yield cls(config=config, session=session)

    async def get_vm(self, name: str) -> VmInfo:
        """Get VM identity and state."""
        data = await self._get(self._vm_path(name), name)
        try:
            payload = VmPayload.model_validate(data)
        except ValidationError as exc:
            raise DependencyUnavailable(
                f"Unexpected gateway VM payload for {name}: {exc}"
            ) from exc
        return VmInfo(
            name=payload.name, state=payload.state, heartbeat=payload.heartbeat
        )

    async def start_vm(self, name: str) -> None:
        """Request VM start."""
        try:
            await self._post(f"{self._vm_path(name)}/start", name, {})
        except VmNotFoundError:
            raise
        except DependencyUnavailable as exc:
            raise VmStartError(str(exc)) from exc
        log.info("Started VM %s on %s", name, self.config.server)

    async def stop_vm(self, name: str, *, force: bool = False) -> None:
        """Request VM stop."""
        await self._post(f"{self._vm_path(name)}/stop", name, {"force": force})
        log.info("Stopped VM %s (force=%s)", name, force)

    async def save_vm(self, name: str) -> None:
        """Request VM save."""
        await self._post(f"{self._vm_path(name)}/save", name, {})
        log.info("Saved VM %s", name)

    async def get_memory(self, name: str) -> MemoryCounters:
        """Get assigned and demand memory."""
        data = await self._get(f"{self._vm_path(name)}/memory", name)
        try:
            payload = MemoryPayload.model_validate(data)
        except ValidationError as exc:
            raise DependencyUnavailable(
                f"Unexpected memory counters for {name}: {exc}"
            ) from exc
        return MemoryCounters(assigned=payload.assigned_mb, demand=payload.demand_mb)

    def _vm_path(self, name: str) -> str:
        server = quote(self.config.server, safe="")
        return f"hosts/{server}/vms/{quote(name, safe='')}"

    async def _get(self, url: str, name: str) -> Any:
        try:
            async with self.session.get(url) as response:
                await self._raise_for_status(response, name)
                return await response.json()
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise DependencyUnavailable(
                f"Management gateway request {url} failed: {exc!r}"
            ) from exc

    async def _post(self, url: str, name: str, payload: dict[str, Any]) -> None:
        try:
            async with self.session.post(url, json=payload) as response:
                await self._raise_for_status(response, name)
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise DependencyUnavailable(
                f"Management gateway request {url} failed: {exc!r}"
            ) from exc

    async def _raise_for_status(
        self, response: aiohttp.ClientResponse, name: str
    ) -> None:
        if response.status == 404:
            raise VmNotFoundError(f"VM {name} not found on {self.config.server}")
        if response.status not in (200, 202, 204):
            text = await response.text()
            raise DependencyUnavailable(
                f"Request {response.method} {response.url} failed: "
                f"{response.status} {text}"
            )
