"""HTTP client for the contract compiler service."""

import logging
from typing import Any
from urllib.parse import urlparse

import httpx

from aesdk.core.config import get_settings
from aesdk.core.errors import CompilerError

logger = logging.getLogger(__name__)

# Supported compiler versions: [MIN, LT)
COMPILER_GE_VERSION = (7, 0, 0)
COMPILER_LT_VERSION = (9, 0, 0)


def _parse_version(version: str) -> tuple[int, ...]:
    core = version.split("-", 1)[0].split("+", 1)[0]
    try:
        return tuple(int(part) for part in core.split("."))
    except ValueError:
        raise CompilerError(f"Unsupported compiler version format: {version!r}") from None


class CompilerClient:
    """Client for the compiler HTTP API.

    Construction validates the URL only; the version check happens on first
    use unless `ignore_version` is set.
    """

    def __init__(
        self,
        url: str,
        ignore_version: bool = False,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize compiler client.

        Args:
            url: Compiler base URL
            ignore_version: Don't check compiler version
            http_client: Preconfigured httpx client, mainly for tests

        Raises:
            CompilerError: If the URL is malformed
        """
        parsed = urlparse(url or "")
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise CompilerError(f"Invalid compiler URL: {url!r}")

        self.url = url.rstrip("/")
        self.ignore_version = ignore_version
        self._http_client = http_client
        self._version_checked = ignore_version
        logger.debug(f"Compiler client created for {self.url}")

    def __repr__(self) -> str:
        return f"CompilerClient(url={self.url!r}, ignore_version={self.ignore_version})"

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self.url, timeout=get_settings().request_timeout
            )
        return self._http_client

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def _request(self, method: str, path: str, json: dict[str, Any] | None = None) -> Any:
        client = await self._get_http_client()
        try:
            response = await client.request(method, path, json=json)
        except httpx.TransportError as e:
            raise CompilerError(f"Compiler at {self.url} is unreachable: {e}") from e

        if response.is_error:
            try:
                body = response.json()
            except ValueError:
                body = response.text[:256]
            raise CompilerError(f"Compiler request {path} failed ({response.status_code}): {body}")
        return response.json()

    async def version(self) -> str:
        """Get compiler version string."""
        result = await self._request("GET", "/version")
        return result["version"]

    async def check_version(self) -> str:
        """Ensure the compiler version is supported.

        Raises:
            CompilerError: If the version is outside the supported range
        """
        version = await self.version()
        if not self.ignore_version:
            parsed = _parse_version(version)
            if not COMPILER_GE_VERSION <= parsed < COMPILER_LT_VERSION:
                raise CompilerError(
                    f"Unsupported compiler version {version}. Supported: "
                    f">= {'.'.join(map(str, COMPILER_GE_VERSION))} "
                    f"< {'.'.join(map(str, COMPILER_LT_VERSION))}"
                )
        self._version_checked = True
        return version

    async def _ensure_version(self) -> None:
        if not self._version_checked:
            await self.check_version()

    async def compile(self, source: str, options: dict[str, Any] | None = None) -> dict[str, Any]:
        """Compile contract source.

        Returns:
            Compiler output with `bytecode` and `aci`
        """
        await self._ensure_version()
        return await self._request("POST", "/compile", json={"code": source, "options": options or {}})

    async def encode_calldata(self, source: str, function: str, arguments: list[str]) -> str:
        """Encode a contract call."""
        await self._ensure_version()
        result = await self._request(
            "POST",
            "/encode-calldata",
            json={"source": source, "function": function, "arguments": arguments},
        )
        return result["calldata"]

    async def decode_call_result(
        self, source: str, function: str, call_result: str, call_value: str
    ) -> Any:
        """Decode a contract call result."""
        await self._ensure_version()
        return await self._request(
            "POST",
            "/decode-call-result",
            json={
                "source": source,
                "function": function,
                "call-result": call_result,
                "call-value": call_value,
            },
        )
