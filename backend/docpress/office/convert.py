"""
DocPress — Word to PDF via LibreOffice.

Runs ``soffice --headless --convert-to pdf`` in a scratch directory. When
no office suite is installed a placeholder PDF is produced instead; for
.docx files it carries the document's paragraph text.
"""

from __future__ import annotations

import asyncio
import io
import shutil
import tempfile
import uuid
from pathlib import Path

from docx import Document

from docpress.core.config import OfficeConfig
from docpress.errors import OfficeConversionError
from docpress.models.uploads import Upload
from docpress.pdf.text_to_pdf import text_to_pdf
from docpress.utils.logging import logger, step_timer

SOFFICE_NAMES = ("soffice", "libreoffice")
WINDOWS_SOFFICE_PATHS = (
    r"C:\Program Files\LibreOffice\program\soffice.exe",
    r"C:\Program Files (x86)\LibreOffice\program\soffice.exe",
    r"C:\LibreOffice\program\soffice.exe",
)

FALLBACK_NOTES = (
    "LibreOffice not installed for proper Word conversion.",
    "Please install LibreOffice for full functionality.",
)


def find_soffice(configured: str | None = None) -> str | None:
    """Locate the office binary: explicit setting, then PATH, then Windows defaults."""
    if configured:
        return shutil.which(configured) or (configured if Path(configured).is_file() else None)
    for name in SOFFICE_NAMES:
        found = shutil.which(name)
        if found:
            return found
    for candidate in WINDOWS_SOFFICE_PATHS:
        if Path(candidate).is_file():
            return candidate
    return None


async def _run_soffice(soffice: str, upload: Upload, input_path: Path, outdir: Path, timeout: float) -> Path:
    proc = await asyncio.create_subprocess_exec(
        soffice, "--headless", "--convert-to", "pdf", "--outdir", str(outdir), str(input_path),
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        _, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        raise OfficeConversionError(upload.filename, f"timed out after {timeout:.0f}s")

    if proc.returncode != 0:
        reason = stderr.decode(errors="replace").strip() or f"exit code {proc.returncode}"
        raise OfficeConversionError(upload.filename, reason)

    output = outdir / f"{input_path.stem}.pdf"
    if not output.is_file():
        raise OfficeConversionError(upload.filename, "no PDF was produced")
    return output


def docx_text(data: bytes) -> str:
    """Paragraph text of a .docx, blank paragraphs dropped."""
    document = Document(io.BytesIO(data))
    return "\n".join(p.text for p in document.paragraphs if p.text.strip())


def fallback_pdf(upload: Upload) -> bytes:
    """Placeholder PDF used when no office suite is available."""
    body = ""
    if upload.extension == ".docx":
        try:
            body = docx_text(upload.data)
        except Exception as exc:
            logger.warning("  Could not read text from %s: %s", upload.filename, exc)
    pdf_bytes, _ = text_to_pdf(body, heading=f"Converted from: {upload.filename}", notes=FALLBACK_NOTES)
    return pdf_bytes


async def word_to_pdf(upload: Upload, office: OfficeConfig, staging_dir: Path) -> bytes:
    """Convert one Word document to PDF bytes."""
    soffice = find_soffice(office.soffice_path)
    if soffice is None:
        logger.warning("  LibreOffice not found, using fallback PDF generation for %s", upload.filename)
        return fallback_pdf(upload)

    with step_timer(f"LibreOffice convert {upload.filename}"):
        staging_dir.mkdir(parents=True, exist_ok=True)
        with tempfile.TemporaryDirectory(dir=staging_dir) as tmp:
            workdir = Path(tmp)
            input_path = workdir / f"{uuid.uuid4().hex}{upload.extension}"
            input_path.write_bytes(upload.data)
            output = await _run_soffice(soffice, upload, input_path, workdir, office.timeout)
            return output.read_bytes()
