from __future__ import annotations

import asyncio
import contextlib
import logging
import re
import time
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator

logger = logging.getLogger(__name__)

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")
_MAX_NAME_CHARS = 120


@dataclass(frozen=True)
class TemporaryFile:
    path: Path
    created_at: datetime


def safe_filename(name: str) -> str:
    base = re.split(r"[\\/]", name or "")[-1]
    cleaned = _UNSAFE_NAME_CHARS.sub("_", base).strip("._")
    return cleaned[-_MAX_NAME_CHARS:] or "upload"


class TransientFileStore:
    """Scratch-directory storage for documents that only live while being parsed."""

    def __init__(self, scratch_dir: str | Path):
        self.scratch_dir = Path(scratch_dir).resolve()

    def ensure_scratch_dir(self) -> None:
        self.scratch_dir.mkdir(parents=True, exist_ok=True)

    def _path_for(self, suggested_name: str) -> Path:
        token = f"{time.time_ns()}-{uuid.uuid4().hex[:8]}"
        return self.scratch_dir / f"temp-{token}-{safe_filename(suggested_name)}"

    def _write(self, path: Path, content: bytes) -> TemporaryFile:
        try:
            path.write_bytes(content)
        except OSError:
            path.unlink(missing_ok=True)
            raise
        return TemporaryFile(path=path, created_at=datetime.now(timezone.utc))

    def materialize(self, content: bytes, suggested_name: str) -> TemporaryFile:
        return self._write(self._path_for(suggested_name), content)

    def release(self, temp_file: TemporaryFile) -> None:
        try:
            temp_file.path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("temp_file_release_failed path=%s: %s", temp_file.path.name, exc)

    @asynccontextmanager
    async def scoped(self, content: bytes, suggested_name: str) -> AsyncIterator[TemporaryFile]:
        path = self._path_for(suggested_name)
        write_task = asyncio.ensure_future(asyncio.to_thread(self._write, path, content))
        try:
            # Shielded so a cancelled request still waits for the write before releasing.
            temp_file = await asyncio.shield(write_task)
            yield temp_file
        finally:
            if not write_task.done():
                with contextlib.suppress(OSError):
                    await write_task
            await asyncio.to_thread(self.release, TemporaryFile(path=path, created_at=datetime.now(timezone.utc)))
