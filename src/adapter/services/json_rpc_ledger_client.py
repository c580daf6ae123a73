"""
Ethereum-compatible JSON-RPC ledger client.

Anchors data as a zero-value transaction from the configured account to
itself and polls receipts until the requested confirmation depth.
"""

import asyncio
import itertools
import logging
from typing import Any, List, Optional

import httpx

from src.app.services.ledger_client import ILedgerClient, LedgerReceipt
from src.domain.errors import (
    LedgerTimeoutError,
    PermanentProviderError,
    TransientProviderError,
)

logger = logging.getLogger(__name__)


class JsonRpcLedgerClient(ILedgerClient):
    def __init__(
        self,
        rpc_url: str,
        account: str,
        chain_id: Optional[str] = None,
        gas_limit: int = 100000,
        confirmation_timeout: float = 120.0,
        poll_interval: float = 2.0,
        request_timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.rpc_url = rpc_url
        self.account = account
        self.chain_id = chain_id
        self.gas_limit = gas_limit
        self.confirmation_timeout = confirmation_timeout
        self.poll_interval = poll_interval
        self._client = client or httpx.AsyncClient(timeout=request_timeout)
        self._ids = itertools.count(1)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _call(self, method: str, params: List[Any]) -> Any:
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        try:
            response = await self._client.post(self.rpc_url, json=payload)
        except httpx.HTTPError as exc:
            raise TransientProviderError(f"{method} request failed: {exc}") from exc

        if response.status_code == 429 or response.status_code >= 500:
            raise TransientProviderError(
                f"{method} returned HTTP {response.status_code}",
                code=str(response.status_code),
            )
        if response.status_code >= 400:
            raise PermanentProviderError(
                f"{method} returned HTTP {response.status_code}",
                code=str(response.status_code),
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise PermanentProviderError(f"{method} returned invalid JSON") from exc

        error = body.get("error")
        if error:
            raise PermanentProviderError(
                f"{method} error: {error.get('message', error)}",
                code=str(error.get("code")),
            )
        return body.get("result")

    async def submit_transaction(self, data: bytes) -> str:
        tx = {
            "from": self.account,
            "to": self.account,
            "value": "0x0",
            "gas": hex(self.gas_limit),
            "data": "0x" + data.hex(),
        }
        tx_id = await self._call("eth_sendTransaction", [tx])
        if not tx_id:
            raise PermanentProviderError("eth_sendTransaction returned no transaction hash")
        return tx_id

    async def wait_for_confirmation(
        self, tx_id: str, confirmations: int = 1
    ) -> LedgerReceipt:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.confirmation_timeout

        while True:
            receipt = await self._call("eth_getTransactionReceipt", [tx_id])
            if receipt and receipt.get("blockNumber"):
                if int(receipt.get("status", "0x1"), 16) == 0:
                    raise PermanentProviderError(f"Transaction {tx_id} reverted")

                block_number = int(receipt["blockNumber"], 16)
                head = int(await self._call("eth_blockNumber", []), 16)
                if head - block_number + 1 >= confirmations:
                    return LedgerReceipt(
                        tx_id=tx_id, block_number=block_number, chain_id=self.chain_id
                    )

            if loop.time() >= deadline:
                raise LedgerTimeoutError(
                    f"Transaction {tx_id} not confirmed within {self.confirmation_timeout}s"
                )
            logger.debug(f"Waiting for confirmation of {tx_id}")
            await asyncio.sleep(self.poll_interval)

    async def get_transaction_input(self, tx_id: str) -> Optional[str]:
        tx = await self._call("eth_getTransactionByHash", [tx_id])
        if not tx:
            return None
        return tx.get("input") or tx.get("data")
