"""
DocPress — Output file store.

Converted PDFs are written to the output directory and served back by
name. Old files in the output and upload directories are swept after
the retention period.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from pathlib import Path

from docpress.errors import FileNotFoundInStoreError
from docpress.models.results import StoredFile
from docpress.utils.logging import logger


def timestamp_ms() -> int:
    """Millisecond timestamp used to name output files."""
    return int(time.time() * 1000)


def is_writable(directory: Path) -> bool:
    probe = directory / f"_test_{uuid.uuid4().hex}.txt"
    try:
        probe.write_text("test")
        probe.unlink()
        return True
    except OSError:
        return False


class OutputStore:
    """Flat directory of downloadable results."""

    def __init__(self, output_dir: Path, upload_dir: Path):
        self.output_dir = Path(output_dir)
        self.upload_dir = Path(upload_dir)
        for directory in (self.output_dir, self.upload_dir):
            directory.mkdir(parents=True, exist_ok=True)
            logger.info("  Using directory: %s", directory)

    def _unique_path(self, name: str) -> Path:
        base = Path(Path(name).name)
        path = self.output_dir / base
        counter = 1
        while path.exists():
            path = self.output_dir / f"{base.stem}_{counter}{base.suffix}"
            counter += 1
        return path

    def save(self, name: str, data: bytes) -> StoredFile:
        """Write ``data`` under ``name``; a numeric suffix avoids overwrites."""
        path = self._unique_path(name)
        path.write_bytes(data)
        logger.info("  Saved %s (%d bytes)", path.name, len(data))
        return StoredFile(
            id=str(uuid.uuid4()),
            pdf_name=path.name,
            pdf_path=f"/output/{path.name}",
            size=path.stat().st_size,
        )

    def resolve(self, name: str) -> Path:
        """Map a requested name to a stored file. Only the basename is honoured."""
        path = self.output_dir / Path(name).name
        if not Path(name).name or not path.is_file():
            raise FileNotFoundInStoreError(name)
        return path

    def list_files(self) -> list[str]:
        return sorted(p.name for p in self.output_dir.iterdir() if p.is_file())

    def directory_status(self) -> dict[str, dict[str, object]]:
        return {
            label: {
                "path": str(directory),
                "exists": directory.is_dir(),
                "writable": directory.is_dir() and is_writable(directory),
            }
            for label, directory in (("uploads", self.upload_dir), ("output", self.output_dir))
        }

    def cleanup(self, max_age_seconds: float, now: float | None = None) -> int:
        """Delete files older than ``max_age_seconds``. Returns how many were removed."""
        cutoff = (now if now is not None else time.time()) - max_age_seconds
        removed = 0
        for directory in (self.upload_dir, self.output_dir):
            for path in directory.iterdir():
                try:
                    if path.is_file() and path.stat().st_mtime < cutoff:
                        path.unlink()
                        removed += 1
                except OSError as exc:
                    logger.error("  Could not remove %s: %s", path, exc)
        if removed:
            logger.info("  Cleanup removed %d expired file(s)", removed)
        return removed

    async def run_cleanup_loop(self, max_age_seconds: float, interval_seconds: float) -> None:
        """Sweep expired files forever; cancel the task to stop."""
        while True:
            await asyncio.sleep(interval_seconds)
            await asyncio.to_thread(self.cleanup, max_age_seconds)
