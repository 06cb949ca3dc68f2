"""Byte-range fetchers used to read the leading bytes of an asset."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Protocol
from urllib.parse import urlparse
from urllib.request import url2pathname

import httpx

from labeldesk.errors import LabelDeskError


class FetchError(LabelDeskError):
    """Raised when the leading bytes of an asset cannot be read."""


class ByteRangeFetcher(Protocol):
    """Read a prefix of an asset addressed by a normalized path or URL."""

    async def fetch(self, uri: str, length: int) -> bytes:
        """Return at most ``length`` bytes from the start of ``uri``."""
        ...


def file_uri_to_path(uri: str) -> Path:
    """Convert a ``file:`` reference (or a bare path) to a filesystem path."""
    if uri.lower().startswith("file:"):
        return Path(url2pathname(urlparse(uri).path))
    return Path(uri)


class LocalFileFetcher:
    """Read byte prefixes of ``file:`` references from the local filesystem."""

    async def fetch(self, uri: str, length: int) -> bytes:
        path = file_uri_to_path(uri)
        try:
            return await asyncio.to_thread(self._read_prefix, path, length)
        except OSError as exc:
            raise FetchError(f"Unable to read {path}: {exc}") from exc

    @staticmethod
    def _read_prefix(path: Path, length: int) -> bytes:
        with path.open("rb") as fh:
            return fh.read(length)


class HttpRangeFetcher:
    """Request byte prefixes of remote assets with an HTTP ``Range`` header.

    Servers that ignore the header still work; the body is truncated locally
    once enough bytes have arrived.
    """

    def __init__(self, client: httpx.AsyncClient | None = None, *, timeout: float = 10.0) -> None:
        self._client = client
        self._timeout = timeout

    async def fetch(self, uri: str, length: int) -> bytes:
        headers = {"Range": f"bytes=0-{max(length - 1, 0)}"}
        try:
            if self._client is not None:
                return await self._read(self._client, uri, headers, length)
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                return await self._read(client, uri, headers, length)
        except httpx.HTTPError as exc:
            raise FetchError(f"Unable to fetch leading bytes of {uri}: {exc}") from exc

    @staticmethod
    async def _read(
        client: httpx.AsyncClient, uri: str, headers: dict[str, str], length: int
    ) -> bytes:
        buffer = bytearray()
        async with client.stream("GET", uri, headers=headers) as response:
            response.raise_for_status()
            async for chunk in response.aiter_bytes():
                buffer.extend(chunk)
                if len(buffer) >= length:
                    break
        return bytes(buffer[:length])


class SchemeFetcher:
    """Dispatch to the HTTP or local fetcher based on the URI scheme."""

    def __init__(
        self,
        *,
        http: ByteRangeFetcher | None = None,
        local: ByteRangeFetcher | None = None,
    ) -> None:
        self._http = http or HttpRangeFetcher()
        self._local = local or LocalFileFetcher()

    async def fetch(self, uri: str, length: int) -> bytes:
        scheme = uri.split(":", 1)[0].lower() if ":" in uri else ""
        if scheme in {"http", "https"}:
            return await self._http.fetch(uri, length)
        return await self._local.fetch(uri, length)


__all__ = [
    "ByteRangeFetcher",
    "FetchError",
    "HttpRangeFetcher",
    "LocalFileFetcher",
    "SchemeFetcher",
    "file_uri_to_path",
]
