"""
chains/mirror_node.py - Hedera mirror node client.

Provides:
- Paginated contract listing (GET /api/v1/contracts)
- Contract detail with bytecode (GET /api/v1/contracts/{id})
- Read-only call simulation (POST /api/v1/contracts/call)

Retry contract:
- HTTP 429 on any endpoint: sleep a fixed delay, retry the same request, unbounded
- HTTP 400 on a call simulation: the call reverted, returns None silently
- Any other failure: logged, returns None
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Any

import httpx

from core.constants import (
    CONTRACT_CALL_PATH,
    CONTRACTS_PATH,
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    DEFAULT_PAGE_SIZE,
    DEFAULT_RATE_LIMIT_DELAY_MS,
    ErrorCode,
)
from core.logging import get_logger, log_error
from core.models import ContractPage, ContractRecord

logger = get_logger(__name__)

ENDPOINT_CONTRACTS = "contracts"
ENDPOINT_CONTRACT_DETAIL = "contract_detail"
ENDPOINT_CONTRACT_CALL = "contract_call"


@dataclass
class EndpointStats:
    """Statistics for a mirror node endpoint."""
    endpoint: str
    total_requests: int = 0
    attempts: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    rate_limited: int = 0
    reverted_calls: int = 0
    total_latency_ms: int = 0
    last_error: str | None = None
    last_success_ts: int | None = None

    @property
    def avg_latency_ms(self) -> int:
        if self.successful_requests == 0:
            return 0
        return self.total_latency_ms // self.successful_requests

    @property
    def success_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.successful_requests / self.total_requests


class MirrorNodeClient:
    """
    Async client for the mirror node REST and web3 APIs.

    Usage:
        client = MirrorNodeClient("https://testnet.mirrornode.hedera.com")
        page = await client.fetch_contract_page(None)
        await client.close()
    """

    def __init__(
        self,
        mirror_node_url: str,
        web3_url: str | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        rate_limit_delay_ms: int = DEFAULT_RATE_LIMIT_DELAY_MS,
        timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.mirror_node_url = mirror_node_url.rstrip("/")
        self.web3_url = (web3_url or mirror_node_url).rstrip("/")
        self.page_size = page_size
        self.rate_limit_delay_ms = rate_limit_delay_ms
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

        # Set when the most recent page fetch failed (vs. an empty page)
        self.last_page_error: str | None = None

        self.stats: dict[str, EndpointStats] = {
            name: EndpointStats(endpoint=name)
            for name in (ENDPOINT_CONTRACTS, ENDPOINT_CONTRACT_DETAIL, ENDPOINT_CONTRACT_CALL)
        }

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout_seconds),
                limits=httpx.Limits(max_connections=20),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def first_page_url(self) -> str:
        return f"{self.mirror_node_url}{CONTRACTS_PATH}?limit={self.page_size}&order=asc"

    def cursor_url(self, cursor: str) -> str:
        """Turn a cursor (relative links.next or absolute URL) into a URL."""
        if cursor.startswith(("http://", "https://")):
            return cursor
        return f"{self.mirror_node_url}{cursor}"

    async def _request(
        self,
        endpoint: str,
        method: str,
        url: str,
        payload: dict[str, Any] | None = None,
    ) -> tuple[httpx.Response, int]:
        """
        Send a request, retrying rate-limited responses with a fixed delay.

        Returns:
            (response, latency_ms) for the first non-429 response

        Raises:
            httpx.HTTPError: on transport failure
        """
        client = await self._get_client()
        stats = self.stats[endpoint]

        # One logical request, however many 429 retries it takes
        stats.total_requests += 1

        while True:
            stats.attempts += 1
            start_ms = int(time.time() * 1000)
            resp = await client.request(method, url, json=payload)
            latency_ms = int(time.time() * 1000) - start_ms

            if resp.status_code != 429:
                return resp, latency_ms

            stats.rate_limited += 1
            logger.warning(
                "Rate limited by mirror node, retrying",
                extra={"context": {
                    "error_code": ErrorCode.INFRA_RATE_LIMIT.value,
                    "endpoint": endpoint,
                    "url": url,
                    "delay_ms": self.rate_limit_delay_ms,
                }},
            )
            await asyncio.sleep(self.rate_limit_delay_ms / 1000)

    def _record_success(self, endpoint: str, latency_ms: int) -> None:
        stats = self.stats[endpoint]
        stats.successful_requests += 1
        stats.total_latency_ms += latency_ms
        stats.last_success_ts = int(time.time() * 1000)

    def _record_failure(self, endpoint: str, url: str, error: Exception) -> str:
        stats = self.stats[endpoint]
        stats.failed_requests += 1
        stats.last_error = str(error) or type(error).__name__

        code = (
            ErrorCode.INFRA_TIMEOUT
            if isinstance(error, httpx.TimeoutException)
            else ErrorCode.INFRA_HTTP_ERROR
        )
        log_error(
            logger,
            code.value,
            f"Mirror node request failed: {stats.last_error}",
            endpoint=endpoint,
            url=url,
        )
        return stats.last_error

    async def _get_json(self, endpoint: str, url: str) -> dict[str, Any] | None:
        try:
            resp, latency_ms = await self._request(endpoint, "GET", url)
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            self._record_failure(endpoint, url, e)
            return None

        self._record_success(endpoint, latency_ms)
        return data

    async def fetch_contract_page(self, cursor: str | None = None) -> ContractPage | None:
        """
        Fetch one page of the contract list.

        Args:
            cursor: links.next from a previous page, or None for the first page

        Returns:
            ContractPage, or None if the request failed
        """
        url = self.cursor_url(cursor) if cursor else self.first_page_url()
        self.last_page_error = None

        data = await self._get_json(ENDPOINT_CONTRACTS, url)
        if data is None:
            self.last_page_error = self.stats[ENDPOINT_CONTRACTS].last_error
            return None

        try:
            return ContractPage.from_api(data)
        except (KeyError, TypeError, AttributeError) as e:
            self.last_page_error = self._record_failure(ENDPOINT_CONTRACTS, url, e)
            return None

    async def fetch_contract_detail(self, contract_id: str) -> ContractRecord | None:
        """
        Fetch a single contract including its bytecode.

        Args:
            contract_id: Native contract id or EVM address

        Returns:
            ContractRecord, or None if the request failed
        """
        url = f"{self.mirror_node_url}{CONTRACTS_PATH}/{contract_id}"

        data = await self._get_json(ENDPOINT_CONTRACT_DETAIL, url)
        if data is None:
            return None

        try:
            return ContractRecord.from_api(data)
        except (KeyError, TypeError, AttributeError) as e:
            self._record_failure(ENDPOINT_CONTRACT_DETAIL, url, e)
            return None

    async def simulate_call(
        self,
        to: str,
        data: str,
        from_address: str | None = None,
    ) -> str | None:
        """
        Simulate a read-only contract call.

        Args:
            to: Contract EVM address
            data: Encoded calldata (0x-prefixed)
            from_address: Optional caller address

        Returns:
            Hex result string, or None if the call reverted, returned
            no data, or failed
        """
        url = f"{self.web3_url}{CONTRACT_CALL_PATH}"
        payload: dict[str, Any] = {"data": data, "to": to, "estimate": False}
        if from_address:
            payload["from"] = from_address

        try:
            resp, latency_ms = await self._request(ENDPOINT_CONTRACT_CALL, "POST", url, payload)
            if resp.status_code == 400:
                # Reverted or unknown selector: routine when probing non-token contracts
                self.stats[ENDPOINT_CONTRACT_CALL].reverted_calls += 1
                return None
            resp.raise_for_status()
            body = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            self._record_failure(ENDPOINT_CONTRACT_CALL, url, e)
            return None

        self._record_success(ENDPOINT_CONTRACT_CALL, latency_ms)

        result = body.get("result") if isinstance(body, dict) else None
        if not result or result == "0x":
            return None
        return result

    def get_stats_summary(self) -> dict:
        """Get statistics summary for all endpoints."""
        return {
            name: {
                "total_requests": s.total_requests,
                "attempts": s.attempts,
                "success_rate": round(s.success_rate, 3),
                "avg_latency_ms": s.avg_latency_ms,
                "rate_limited": s.rate_limited,
                "reverted_calls": s.reverted_calls,
                "last_error": s.last_error,
            }
            for name, s in self.stats.items()
        }
