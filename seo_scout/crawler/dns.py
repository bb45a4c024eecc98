"""
Per-session DNS resolution cache.

A hostname is resolved at most once per session: successes are remembered as
the first returned address, failures are remembered with their reason so an
unresolvable domain fails fast for every later URL on it.
Concurrent first lookups of one host share a single resolution.

This is an availability pre-check only: aiohttp's connector resolves the host
again, through its own resolver, when the page is actually requested.
"""
from __future__ import annotations

import asyncio
import socket
from dataclasses import dataclass
from typing import Dict, Optional

from aiohttp.abc import AbstractResolver
from aiohttp.resolver import ThreadedResolver

from seo_scout.logger import get_logger

__all__ = ("Resolution", "DnsResolverCache")

log = get_logger("dns")


@dataclass(frozen=True, slots=True)
class Resolution:
    available: bool
    address: Optional[str] = None
    reason: Optional[str] = None


class DnsResolverCache:
    """Resolves hostnames through an aiohttp resolver and caches the answers."""

    def __init__(self, resolver: Optional[AbstractResolver] = None, timeout: float = 10.0) -> None:
        self._resolver = resolver
        self._timeout = timeout
        self._addresses: Dict[str, str] = {}
        self._failures: Dict[str, str] = {}
        self._inflight: Dict[str, asyncio.Future[Resolution]] = {}
        self.lookups = 0

    async def resolve(self, hostname: str) -> Resolution:
        host = hostname.lower().strip("[]")
        if host in self._addresses:
            return Resolution(True, self._addresses[host])
        if host in self._failures:
            return Resolution(False, reason=self._failures[host])
        pending = self._inflight.get(host)
        if pending is not None:
            return await asyncio.shield(pending)

        future: asyncio.Future[Resolution] = asyncio.get_running_loop().create_future()
        self._inflight[host] = future
        try:
            resolution = await self._lookup(host)
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as exc:
            future.set_exception(exc)
            future.exception()
            raise
        else:
            future.set_result(resolution)
            return resolution
        finally:
            self._inflight.pop(host, None)

    async def _lookup(self, host: str) -> Resolution:
        self.lookups += 1
        if self._resolver is None:
            # ThreadedResolver binds to the running loop
            self._resolver = ThreadedResolver()
        try:
            infos = await asyncio.wait_for(
                self._resolver.resolve(host, 0, family=socket.AF_UNSPEC),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            return self._fail(host, f"DNS lookup timed out after {self._timeout:g}s")
        except OSError as exc:
            return self._fail(host, str(exc) or exc.__class__.__name__)

        if not infos:
            return self._fail(host, "no addresses returned")
        address = infos[0]["host"]
        self._addresses[host] = address
        log.debug("Resolved %s -> %s", host, address)
        return Resolution(True, address)

    def _fail(self, host: str, reason: str) -> Resolution:
        log.warning("DNS resolution failed for %s: %s", host, reason)
        self._failures[host] = reason
        return Resolution(False, reason=reason)

    def clear(self) -> None:
        self._addresses.clear()
        self._failures.clear()
        self._inflight.clear()

    async def close(self) -> None:
        if self._resolver is not None:
            await self._resolver.close()

    def __len__(self) -> int:
        return len(self._addresses)

    def __contains__(self, hostname: object) -> bool:
        return isinstance(hostname, str) and hostname.lower() in self._addresses
