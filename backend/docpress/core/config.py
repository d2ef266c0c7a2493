"""
DocPress — Backend Configuration
Loads .env automatically, then reads all settings from environment variables.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

_backend_dir = Path(__file__).resolve().parent.parent.parent
_project_root = _backend_dir.parent
load_dotenv(_backend_dir / ".env")


@dataclass(frozen=True)
class UploadLimits:
    """Per-request upload limits."""
    max_upload_mb: int
    max_word_files: int
    max_image_files: int
    max_pdf_files: int

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


@dataclass(frozen=True)
class OfficeConfig:
    """External office suite used for Word → PDF."""
    soffice_path: str | None
    timeout: float


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration."""
    host: str
    port: int
    debug: bool
    upload_dir: Path
    output_dir: Path
    static_dir: Path
    limits: UploadLimits
    office: OfficeConfig
    file_retention_seconds: int
    cleanup_interval_seconds: int


def _load_config() -> AppConfig:
    return AppConfig(
        host=os.getenv("APP_HOST", "0.0.0.0"),
        port=int(os.getenv("APP_PORT", "3000")),
        debug=os.getenv("APP_DEBUG", "false").lower() == "true",
        upload_dir=Path(os.getenv("DOCPRESS_UPLOAD_DIR", str(_project_root / "uploads"))),
        output_dir=Path(os.getenv("DOCPRESS_OUTPUT_DIR", str(_project_root / "output"))),
        static_dir=Path(os.getenv("DOCPRESS_STATIC_DIR", str(_project_root / "frontend"))),
        limits=UploadLimits(
            max_upload_mb=int(os.getenv("MAX_UPLOAD_MB", "20")),
            max_word_files=int(os.getenv("MAX_WORD_FILES", "10")),
            max_image_files=int(os.getenv("MAX_IMAGE_FILES", "20")),
            max_pdf_files=int(os.getenv("MAX_PDF_FILES", "20")),
        ),
        office=OfficeConfig(
            soffice_path=os.getenv("SOFFICE_PATH") or None,
            timeout=float(os.getenv("SOFFICE_TIMEOUT", "120")),
        ),
        file_retention_seconds=int(os.getenv("FILE_RETENTION_SECONDS", "3600")),
        cleanup_interval_seconds=int(os.getenv("CLEANUP_INTERVAL_SECONDS", "3600")),
    )


settings = _load_config()
