"""Node client with retrying HTTP transport."""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from aesdk.core.config import get_settings
from aesdk.core.errors import NodeError

logger = logging.getLogger(__name__)

API_PREFIX = "/v3"

# HTTP statuses worth another attempt
_RETRIABLE_STATUSES = (429, 502, 503, 504)


class NodeClient(ABC):
    """Abstract base class for node clients.

    The facade itself only needs `get_status` and `get_node_info`; the
    remaining methods are what the bundled method tables call.
    """

    @abstractmethod
    async def get_status(self) -> dict[str, Any]:
        """Get node status, including `network_id`."""
        ...

    @abstractmethod
    async def get_node_info(self) -> dict[str, Any]:
        """Get node identity and version metadata."""
        ...

    @abstractmethod
    async def get_current_key_block_height(self) -> int:
        """Get current chain height."""
        ...

    @abstractmethod
    async def get_current_generation(self) -> dict[str, Any]:
        """Get current generation."""
        ...

    @abstractmethod
    async def get_micro_block_transactions(self, block_hash: str) -> list[dict[str, Any]]:
        """Get transactions of a micro block."""
        ...

    @abstractmethod
    async def get_account(self, address: str) -> dict[str, Any]:
        """Get account state by address."""
        ...

    @abstractmethod
    async def get_next_nonce(self, address: str) -> int:
        """Get next nonce for address."""
        ...

    @abstractmethod
    async def get_name(self, name: str) -> dict[str, Any]:
        """Get name entry by name."""
        ...

    @abstractmethod
    async def get_oracle(self, oracle_id: str) -> dict[str, Any]:
        """Get oracle by id."""
        ...

    @abstractmethod
    async def get_oracle_query(self, oracle_id: str, query_id: str) -> dict[str, Any]:
        """Get oracle query by id."""
        ...

    @abstractmethod
    async def build_tx(self, tx_type: str, params: dict[str, Any]) -> str:
        """Build an unsigned transaction of the given type."""
        ...

    @abstractmethod
    async def dry_run(self, txs: list[dict[str, Any]], top: str | None = None) -> dict[str, Any]:
        """Dry-run transactions on top of a block."""
        ...

    @abstractmethod
    async def post_transaction(self, tx: str) -> str:
        """Post a signed transaction, returning its hash."""
        ...

    @abstractmethod
    async def get_transaction(self, tx_hash: str) -> dict[str, Any]:
        """Get transaction by hash."""
        ...

    @abstractmethod
    async def get_transaction_info(self, tx_hash: str) -> dict[str, Any]:
        """Get call info of a mined contract transaction."""
        ...


class HttpNodeClient(NodeClient):
    """Node client speaking the node's REST API over HTTP."""

    def __init__(
        self,
        url: str,
        timeout: float | None = None,
        max_retries: int | None = None,
        retry_delay: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize node client.

        Args:
            url: Node base URL
            timeout: Request timeout in seconds (settings default)
            max_retries: Attempts per request (settings default)
            retry_delay: Base delay between attempts (settings default)
            http_client: Preconfigured httpx client, mainly for tests
        """
        settings = get_settings()
        self.url = url.rstrip("/")
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self.max_retries = max_retries if max_retries is not None else settings.max_retries
        self.retry_delay = retry_delay if retry_delay is not None else settings.retry_delay
        self._http_client = http_client

    def __repr__(self) -> str:
        return f"HttpNodeClient(url={self.url!r})"

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(base_url=self.url, timeout=self.timeout)
        return self._http_client

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Execute request with retries on transport errors and 5xx.

        Raises:
            NodeError: On 4xx responses or when all attempts fail
        """
        client = await self._get_http_client()
        url = f"{API_PREFIX}{path}"
        last_error: Exception | None = None

        for attempt in range(self.max_retries):
            try:
                response = await client.request(method, url, json=json, params=params)
            except httpx.TransportError as e:
                last_error = e
                logger.warning(f"Node {self.url} error (attempt {attempt + 1}): {e}")
            else:
                if response.status_code in _RETRIABLE_STATUSES:
                    last_error = NodeError(
                        "Node temporarily unavailable",
                        url=f"{self.url}{url}",
                        status_code=response.status_code,
                    )
                    logger.warning(
                        f"Node {self.url} returned {response.status_code} "
                        f"(attempt {attempt + 1})"
                    )
                elif response.is_error:
                    raise NodeError(
                        _error_reason(response),
                        url=f"{self.url}{url}",
                        status_code=response.status_code,
                    )
                else:
                    return response.json()

            if attempt < self.max_retries - 1:
                await asyncio.sleep(self.retry_delay * (attempt + 1))

        raise NodeError(
            f"All attempts failed. Last error: {last_error}", url=f"{self.url}{url}"
        )

    async def get_status(self) -> dict[str, Any]:
        """Get node status."""
        return await self._request("GET", "/status")

    async def get_node_info(self) -> dict[str, Any]:
        """Get node identity and version metadata."""
        status = await self.get_status()
        height = status.get("top_block_height", 0)
        protocols = [
            p for p in status.get("protocols", []) if p.get("effective_at_height", 0) <= height
        ]
        protocol = max(
            (p.get("version", 0) for p in protocols),
            default=None,
        )
        return {
            "url": self.url,
            "node_network_id": status.get("network_id"),
            "version": status.get("node_version"),
            "consensus_protocol_version": protocol,
        }

    async def get_current_key_block_height(self) -> int:
        """Get current chain height."""
        result = await self._request("GET", "/key-blocks/current/height")
        return int(result["height"])

    async def get_current_generation(self) -> dict[str, Any]:
        """Get current generation (key block and its micro blocks)."""
        return await self._request("GET", "/generations/current")

    async def get_micro_block_transactions(self, block_hash: str) -> list[dict[str, Any]]:
        """Get transactions of a micro block."""
        result = await self._request("GET", f"/micro-blocks/hash/{block_hash}/transactions")
        return result.get("transactions", [])

    async def get_account(self, address: str) -> dict[str, Any]:
        """Get account state by address."""
        return await self._request("GET", f"/accounts/{address}")

    async def get_next_nonce(self, address: str) -> int:
        """Get next nonce for address."""
        result = await self._request("GET", f"/accounts/{address}/next-nonce")
        return int(result["next_nonce"])

    async def get_name(self, name: str) -> dict[str, Any]:
        """Get name entry by name."""
        return await self._request("GET", f"/names/{name}")

    async def get_oracle(self, oracle_id: str) -> dict[str, Any]:
        """Get oracle by id."""
        return await self._request("GET", f"/oracles/{oracle_id}")

    async def get_oracle_query(self, oracle_id: str, query_id: str) -> dict[str, Any]:
        """Get oracle query by id."""
        return await self._request("GET", f"/oracles/{oracle_id}/queries/{query_id}")

    async def build_tx(self, tx_type: str, params: dict[str, Any]) -> str:
        """Build an unsigned transaction of the given type."""
        result = await self._request("POST", f"/debug/transactions/{tx_type}", json=params)
        return result["tx"]

    async def dry_run(self, txs: list[dict[str, Any]], top: str | None = None) -> dict[str, Any]:
        """Dry-run transactions on top of a block."""
        body: dict[str, Any] = {"txs": txs}
        if top:
            body["top"] = top
        return await self._request("POST", "/dry-run", json=body)

    async def post_transaction(self, tx: str) -> str:
        """Post a signed transaction, returning its hash."""
        result = await self._request("POST", "/transactions", json={"tx": tx})
        return result["tx_hash"]

    async def get_transaction(self, tx_hash: str) -> dict[str, Any]:
        """Get transaction by hash."""
        return await self._request("GET", f"/transactions/{tx_hash}")

    async def get_transaction_info(self, tx_hash: str) -> dict[str, Any]:
        """Get call info of a mined contract transaction."""
        result = await self._request("GET", f"/transactions/{tx_hash}/info")
        return result.get("call_info", result)


def _error_reason(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:256] or f"HTTP {response.status_code}"
    if isinstance(body, dict) and body.get("reason"):
        return str(body["reason"])
    return str(body)[:256]
