import asyncio
import logging
from pathlib import Path
from typing import Optional

from src.app.services.blob_storage import IBlobStorage

logger = logging.getLogger(__name__)


class LocalBlobStorage(IBlobStorage):
    """
    Filesystem-backed object storage.

    Blobs live under root at their logical path; the storage reference is
    the logical path itself.
    """

    def __init__(self, root: str):
        self.root = Path(root).resolve()

    def _resolve(self, path: str) -> Path:
        full_path = (self.root / path).resolve()
        if full_path != self.root and self.root not in full_path.parents:
            raise ValueError(f"Blob path escapes storage root: {path}")
        return full_path

    async def write(
        self, path: str, content: bytes, content_type: str = "application/json"
    ) -> str:
        full_path = self._resolve(path)
        await asyncio.to_thread(self._write_file, full_path, content)
        logger.debug(f"Stored blob {path} ({len(content)} bytes, {content_type})")
        return path

    async def read(self, path: str) -> Optional[bytes]:
        full_path = self._resolve(path)
        return await asyncio.to_thread(self._read_file, full_path)

    @staticmethod
    def _write_file(full_path: Path, content: bytes) -> None:
        full_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = full_path.with_name(full_path.name + ".tmp")
        tmp_path.write_bytes(content)
        tmp_path.replace(full_path)

    @staticmethod
    def _read_file(full_path: Path) -> Optional[bytes]:
        if not full_path.is_file():
            return None
        return full_path.read_bytes()
