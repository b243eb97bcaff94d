# repository/upload_repository.py
import asyncio
import time
from pathlib import Path
from typing import Optional
from config.settings import settings
from util.functions import is_safe_name


class UploadRepository:
    """
    Local-disk store for uploaded documents. Files are named
    `<epoch-ms>-<original name>`; the extracted text lives next to them as
    the `.txt` sidecar read by the document text loader.
    """

    def __init__(self, base_dir: str = settings.UPLOAD_DIR) -> None:
        self._dir = Path(base_dir)

    def path_for(self, filename: str) -> Optional[Path]:
        if not is_safe_name(filename):
            return None
        return self._dir / filename

    def contains(self, path: str) -> bool:
        """True when `path` resolves to somewhere inside the upload store."""
        try:
            resolved = Path(path).resolve()
        except (OSError, RuntimeError, ValueError):
            return False
        return resolved.is_relative_to(self._dir.resolve())

    def _put(self, original_name: str, data: bytes) -> Path:
        self._dir.mkdir(parents=True, exist_ok=True)
        safe = Path(original_name).name or "document"
        path = self._dir / f"{int(time.time() * 1000)}-{safe}"
        path.write_bytes(data)
        return path

    async def put(self, original_name: str, data: bytes) -> Path:
        return await asyncio.to_thread(self._put, original_name, data)
