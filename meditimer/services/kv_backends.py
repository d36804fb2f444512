import asyncio
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

import redis.asyncio as redis

from meditimer.config import Settings

logger = logging.getLogger(__name__)


class KeyValueBackend(Protocol):
    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> object: ...

    async def delete(self, key: str) -> object: ...

    async def ping(self) -> object: ...

    async def aclose(self) -> None: ...


class FileBackend:
    """Stores each key as ``<data_dir>/<key>.json``.

    Writes go to a temp file in the same directory and are swapped in with
    ``os.replace`` so a reader never sees a half-written blob.
    """

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)

    def _path(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def _read(self, key: str) -> str | None:
        try:
            return self._path(key).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def _write(self, key: str, value: str) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.data_dir, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp, self._path(key))
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def _delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    async def get(self, key: str) -> str | None:
        return await asyncio.to_thread(self._read, key)

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._write, key, value)

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self._delete, key)

    async def ping(self) -> bool:
        await asyncio.to_thread(self.data_dir.mkdir, parents=True, exist_ok=True)
        return True

    async def aclose(self) -> None:
        pass


def create_backend(settings: Settings) -> KeyValueBackend:
    if settings.STORE_BACKEND == "redis":
        logger.info("Using Redis session storage at %s", settings.REDIS_URL)
        return redis.from_url(settings.REDIS_URL, decode_responses=True)
    if settings.STORE_BACKEND == "file":
        logger.info("Using file session storage in %s", settings.DATA_DIR)
        return FileBackend(settings.DATA_DIR)
    raise ValueError(f"Unknown STORE_BACKEND: {settings.STORE_BACKEND!r}")
