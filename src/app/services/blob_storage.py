from abc import ABC, abstractmethod
from typing import Optional


class IBlobStorage(ABC):
    """Object storage for canonical usage record blobs"""

    @abstractmethod
    async def write(
        self, path: str, content: bytes, content_type: str = "application/json"
    ) -> str:
        """Write content at path (overwriting) and return its storage reference"""
        pass

    @abstractmethod
    async def read(self, path: str) -> Optional[bytes]:
        """Read content at path, None if absent"""
        pass
