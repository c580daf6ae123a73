from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class LedgerReceipt:
    """Confirmed ledger transaction"""

    tx_id: str
    block_number: int
    chain_id: Optional[str] = None


class ILedgerClient(ABC):
    """
    Append-only public ledger.

    Implementations raise TransientProviderError / PermanentProviderError
    (src.domain.errors); a confirmation timeout raises LedgerTimeoutError.
    """

    @abstractmethod
    async def submit_transaction(self, data: bytes) -> str:
        """Send a zero-value transaction to self carrying data; returns tx id"""
        pass

    @abstractmethod
    async def wait_for_confirmation(
        self, tx_id: str, confirmations: int = 1
    ) -> LedgerReceipt:
        """Block until the transaction has the requested confirmations"""
        pass

    @abstractmethod
    async def get_transaction_input(self, tx_id: str) -> Optional[str]:
        """Hex-encoded data of a mined transaction, None if unknown"""
        pass
