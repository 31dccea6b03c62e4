"""Tests for the HTTP node client."""

import json

import httpx
import pytest

from aesdk.core.errors import NodeError
from aesdk.infrastructure.node.client import HttpNodeClient

NODE_URL = "http://node.test"


def make_client(handler, max_retries=3) -> HttpNodeClient:
    """Node client whose HTTP traffic goes to `handler`."""
    http_client = httpx.AsyncClient(base_url=NODE_URL, transport=httpx.MockTransport(handler))
    return HttpNodeClient(NODE_URL, max_retries=max_retries, retry_delay=0, http_client=http_client)


class TestHttpNodeClientRequests:
    """Tests for endpoint mapping."""

    @pytest.mark.asyncio
    async def test_get_status(self):
        """Test status is read from the versioned API."""
        paths = []

        def handler(request):
            paths.append(request.url.path)
            return httpx.Response(200, json={"network_id": "ae_uat"})

        client = make_client(handler)

        assert await client.get_status() == {"network_id": "ae_uat"}
        assert paths == ["/v3/status"]

    @pytest.mark.asyncio
    async def test_get_node_info(self):
        """Test node info picks the protocol effective at the top height."""

        def handler(request):
            return httpx.Response(
                200,
                json={
                    "network_id": "ae_mainnet",
                    "node_version": "7.1.0",
                    "top_block_height": 500,
                    "protocols": [
                        {"version": 5, "effective_at_height": 0},
                        {"version": 6, "effective_at_height": 400},
                        {"version": 7, "effective_at_height": 1000},
                    ],
                },
            )

        info = await make_client(handler).get_node_info()

        assert info == {
            "url": NODE_URL,
            "node_network_id": "ae_mainnet",
            "version": "7.1.0",
            "consensus_protocol_version": 6,
        }

    @pytest.mark.asyncio
    async def test_height_and_nonce(self):
        """Test numeric endpoints are unpacked."""

        def handler(request):
            if request.url.path.endswith("/next-nonce"):
                return httpx.Response(200, json={"next_nonce": 4})
            return httpx.Response(200, json={"height": 321})

        client = make_client(handler)

        assert await client.get_current_key_block_height() == 321
        assert await client.get_next_nonce("ak_a") == 4

    @pytest.mark.asyncio
    async def test_build_tx(self):
        """Test transactions are built by the node debug API."""
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"tx": "tx_built"})

        result = await make_client(handler).build_tx("spend_tx", {"amount": 1})

        assert result == "tx_built"
        assert seen == {"path": "/v3/debug/transactions/spend_tx", "body": {"amount": 1}}

    @pytest.mark.asyncio
    async def test_post_transaction(self):
        """Test posting returns the transaction hash."""

        def handler(request):
            assert request.method == "POST"
            assert json.loads(request.content) == {"tx": "tx_signed"}
            return httpx.Response(200, json={"tx_hash": "th_1"})

        assert await make_client(handler).post_transaction("tx_signed") == "th_1"

    @pytest.mark.asyncio
    async def test_dry_run_top(self):
        """Test the dry-run top block is only sent when given."""
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"results": []})

        client = make_client(handler)
        await client.dry_run([{"tx": "tx_a"}])
        await client.dry_run([{"tx": "tx_a"}], top="kh_top")

        assert "top" not in bodies[0]
        assert bodies[1]["top"] == "kh_top"

    @pytest.mark.asyncio
    async def test_transaction_info(self):
        """Test call info is unwrapped."""

        def handler(request):
            assert request.url.path == "/v3/transactions/th_1/info"
            return httpx.Response(200, json={"call_info": {"return_type": "ok"}})

        assert await make_client(handler).get_transaction_info("th_1") == {"return_type": "ok"}


class TestHttpNodeClientErrors:
    """Tests for error handling and retries."""

    @pytest.mark.asyncio
    async def test_client_error_not_retried(self):
        """Test 4xx responses fail immediately with the node's reason."""
        calls = 0

        def handler(request):
            nonlocal calls
            calls += 1
            return httpx.Response(404, json={"reason": "Account not found"})

        with pytest.raises(NodeError, match="Account not found") as exc_info:
            await make_client(handler).get_account("ak_missing")

        assert calls == 1
        assert exc_info.value.status_code == 404
        assert exc_info.value.url == f"{NODE_URL}/v3/accounts/ak_missing"

    @pytest.mark.asyncio
    async def test_retry_on_unavailable(self):
        """Test 503 responses are retried."""
        responses = iter(
            [httpx.Response(503), httpx.Response(200, json={"network_id": "ae_uat"})]
        )

        status = await make_client(lambda request: next(responses)).get_status()

        assert status["network_id"] == "ae_uat"

    @pytest.mark.asyncio
    async def test_retry_on_transport_error(self):
        """Test connection failures are retried."""
        calls = 0

        def handler(request):
            nonlocal calls
            calls += 1
            if calls == 1:
                raise httpx.ConnectError("refused", request=request)
            return httpx.Response(200, json={"height": 1})

        assert await make_client(handler).get_current_key_block_height() == 1
        assert calls == 2

    @pytest.mark.asyncio
    async def test_all_attempts_fail(self):
        """Test the last error is reported after all attempts."""
        calls = 0

        def handler(request):
            nonlocal calls
            calls += 1
            return httpx.Response(502)

        with pytest.raises(NodeError, match="All attempts failed"):
            await make_client(handler, max_retries=2).get_status()
        assert calls == 2

    @pytest.mark.asyncio
    async def test_close(self):
        """Test closing drops the HTTP client."""
        client = make_client(lambda request: httpx.Response(200, json={}))
        await client.close()
        assert client._http_client is None
