"""DocPress — In-memory upload handed from the HTTP layer to converters."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Upload:
    filename: str
    data: bytes

    @property
    def extension(self) -> str:
        return Path(self.filename).suffix.lower()

    @property
    def size(self) -> int:
        return len(self.data)
