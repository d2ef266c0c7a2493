"""
DocPress — FastAPI Backend

Endpoints:
  POST /api/convert-word       — Word document(s) → PDF
  POST /api/convert-image      — Image(s) → PDF (combined or one per image)
  POST /api/merge-pdfs         — Concatenate PDFs
  POST /api/split-pdf          — Extract a page selection
  POST /api/add-watermark      — Stamp text on every page
  POST /api/protect-pdf        — AES-256 password protection
  GET  /api/download/{name}    — Download a result (also HEAD, /output/{name})
  GET  /api/list-files         — Results currently stored
  GET  /api/check-server       — Directory health
  GET  /api/check-dependencies — Library and LibreOffice status
  GET  /api/debug/status       — Runtime configuration
  POST /api/debug/convert-text — Text → PDF
  GET  /health                 — Health check
"""

import asyncio
import time
import uuid
from importlib import metadata
from pathlib import Path
from typing import NoReturn

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, Field

from docpress.core.config import settings
from docpress.errors import ConversionFailedError, DocPressError, InvalidOptionsError
from docpress.models.options import (
    ConversionOptions,
    ProtectOptions,
    WatermarkOptions,
    build_options,
)
from docpress.models.results import (
    ConversionResponse,
    ConvertedFile,
    OperationResponse,
    PdfResult,
)
from docpress.models.uploads import Upload
from docpress.office.convert import find_soffice, word_to_pdf
from docpress.pdf.image_to_pdf import images_to_pdf
from docpress.pdf.operations import add_watermark, merge_pdfs, protect_pdf, split_pdf
from docpress.pdf.text_to_pdf import text_to_pdf
from docpress.storage.outputs import OutputStore, timestamp_ms
from docpress.utils.logging import logger
from docpress.utils.validate import (
    IMAGE_EXTENSIONS,
    PDF_EXTENSIONS,
    WORD_EXTENSIONS,
    validate_uploads,
)

API_VERSION = "1.0.0"

app = FastAPI(
    title="DocPress API",
    description="Convert Word documents and images to PDF; merge, split, watermark and protect PDFs.",
    version=API_VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

store = OutputStore(settings.output_dir, settings.upload_dir)
_cleanup_task: asyncio.Task | None = None


@app.on_event("startup")
async def _startup():
    global _cleanup_task
    logger.info("")
    logger.info("╔══════════════════════════════════════════════════╗")
    logger.info("║              DocPress  ·  API Server             ║")
    logger.info("╠══════════════════════════════════════════════════╣")
    logger.info("║  POST /api/convert-word   → Word → PDF           ║")
    logger.info("║  POST /api/convert-image  → Image → PDF          ║")
    logger.info("║  POST /api/merge-pdfs     → Merge PDFs           ║")
    logger.info("║  POST /api/split-pdf      → Extract pages        ║")
    logger.info("║  POST /api/add-watermark  → Watermark            ║")
    logger.info("║  POST /api/protect-pdf    → Password protect     ║")
    logger.info("╠══════════════════════════════════════════════════╣")
    logger.info("║  Output dir  : %-33s║", str(settings.output_dir)[-33:])
    logger.info("║  LibreOffice : %-33s║", "✓ found" if find_soffice(settings.office.soffice_path) else "✗ fallback only")
    logger.info("╚══════════════════════════════════════════════════╝")
    logger.info("")

    store.cleanup(settings.file_retention_seconds)
    _cleanup_task = asyncio.create_task(
        store.run_cleanup_loop(settings.file_retention_seconds, settings.cleanup_interval_seconds)
    )


@app.on_event("shutdown")
async def _shutdown():
    if _cleanup_task is not None:
        _cleanup_task.cancel()


# ──────────────────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────────────────

class TextRequest(BaseModel):
    text: str = Field(default="Test PDF document", max_length=100_000)


async def _read_uploads(files: list[UploadFile] | None) -> list[Upload]:
    return [Upload(filename=f.filename or "upload", data=await f.read()) for f in files or []]


def _raise_http(request_id: str, exc: Exception, action: str) -> NoReturn:
    if isinstance(exc, DocPressError):
        logger.warning("[%s] %s rejected: %s — %s", request_id, action, exc.code, exc.message)
        raise HTTPException(status_code=exc.status_code, detail=exc.to_dict()) from exc
    logger.exception("[%s] %s failed", request_id, action)
    raise HTTPException(status_code=500, detail=str(exc)) from exc


def _stem(filename: str) -> str:
    return Path(filename).stem or "document"


# ──────────────────────────────────────────────────────────
# Health and diagnostics
# ──────────────────────────────────────────────────────────

@app.get("/health")
async def health():
    return {"status": "ok", "service": "docpress-api", "version": API_VERSION}


@app.get("/api/check-server")
async def check_server():
    return {
        "status": "ok",
        "time": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "directories": store.directory_status(),
    }


def _package_status(name: str) -> dict[str, object]:
    try:
        return {"installed": True, "version": metadata.version(name)}
    except metadata.PackageNotFoundError as exc:
        return {"installed": False, "error": str(exc)}


def _libreoffice_status() -> dict[str, object]:
    path = find_soffice(settings.office.soffice_path)
    if path:
        return {"installed": True, "path": path}
    return {"installed": False, "error": "LibreOffice not found in PATH or common locations"}


@app.get("/api/check-dependencies")
async def check_dependencies():
    packages = ["fastapi", "pydantic", "pymupdf", "pillow", "python-docx", "python-multipart"]
    dependencies = {name: _package_status(name) for name in packages}
    dependencies["libreoffice"] = _libreoffice_status()
    return {"status": "ok", "dependencies": dependencies}


@app.get("/api/debug/status")
async def debug_status():
    return {
        "success": True,
        "message": "Server is running",
        "version": API_VERSION,
        "debug": settings.debug,
        "config": {
            "uploadsDir": str(settings.upload_dir),
            "outputDir": str(settings.output_dir),
            "port": settings.port,
            "maxUploadMb": settings.limits.max_upload_mb,
            "fileRetentionSeconds": settings.file_retention_seconds,
        },
        "directories": {
            "uploads": settings.upload_dir.is_dir(),
            "output": settings.output_dir.is_dir(),
        },
        "libreOfficeInstalled": _libreoffice_status(),
    }


@app.post("/api/debug/convert-text", response_model=OperationResponse, response_model_exclude_none=True)
async def debug_convert_text(req: TextRequest):
    request_id = uuid.uuid4().hex[:12]
    logger.info("[%s] POST /api/debug/convert-text — %d chars", request_id, len(req.text))
    try:
        pdf_bytes, page_count = text_to_pdf(req.text)
        stored = store.save(f"text_{timestamp_ms()}.pdf", pdf_bytes)
    except Exception as exc:
        _raise_http(request_id, exc, "Text conversion")

    return OperationResponse(
        message="Text converted to PDF successfully",
        result=PdfResult(**stored.model_dump(), page_count=page_count),
    )


# ──────────────────────────────────────────────────────────
# Conversions
# ──────────────────────────────────────────────────────────

@app.post("/api/convert-word", response_model=ConversionResponse, response_model_exclude_none=True)
async def convert_word(
    files: list[UploadFile] | None = File(None, description="Word documents (.doc, .docx)"),
    options: str | None = Form(None),
):
    """
    Convert each uploaded Word document to its own PDF.

    A document that fails to convert is reported in ``failures``; the
    request only fails when no document converts.
    """
    request_id = uuid.uuid4().hex[:12]
    logger.info("[%s] POST /api/convert-word — %d files", request_id, len(files or []))

    try:
        uploads = validate_uploads(
            await _read_uploads(files),
            WORD_EXTENSIONS,
            settings.limits.max_upload_bytes,
            settings.limits.max_word_files,
        )
        conversion_options = ConversionOptions.from_json(options)
        logger.info("[%s] Options: %s", request_id, conversion_options.model_dump(mode="json"))

        converted: list[tuple[Upload, bytes]] = []
        failures: list[str] = []
        for upload in uploads:
            try:
                converted.append((upload, await word_to_pdf(upload, settings.office, settings.upload_dir)))
            except DocPressError as exc:
                failures.append(f"{upload.filename}: {exc.message}")
                logger.warning("[%s]   Skipped %s: %s", request_id, upload.filename, exc.message)

        if not converted:
            raise ConversionFailedError(
                "Failed to convert any Word documents. Please check file formats and try again.",
                failures=failures,
            )

        results: list[ConvertedFile] = []
        for upload, pdf_bytes in converted:
            stored = store.save(f"{_stem(upload.filename)}.pdf", pdf_bytes)
            results.append(ConvertedFile(**stored.model_dump(), original_name=upload.filename))
    except Exception as exc:
        _raise_http(request_id, exc, "Word conversion")

    message = f"Successfully converted {len(results)} file(s)"
    if failures:
        message += f", {len(failures)} failed"
    return ConversionResponse(
        message=message,
        results=results,
        succeeded=len(results),
        failed=len(failures),
        failures=failures or None,
    )


@app.post("/api/convert-image", response_model=ConversionResponse, response_model_exclude_none=True)
async def convert_image(
    files: list[UploadFile] | None = File(None, description="Images (.jpg, .png, .bmp, .webp, .svg)"),
    options: str | None = Form(None, description="JSON: pageSize, orientation, quality, fit, combine"),
):
    """
    Convert uploaded images to PDF.

    Images that cannot be decoded are skipped; the response reports how
    many succeeded and failed.
    """
    request_id = uuid.uuid4().hex[:12]
    logger.info("[%s] POST /api/convert-image — %d files", request_id, len(files or []))

    try:
        conversion_options = ConversionOptions.from_json(options)
        logger.info("[%s] Options: %s", request_id, conversion_options.model_dump(mode="json"))
        uploads = validate_uploads(
            await _read_uploads(files),
            IMAGE_EXTENSIONS,
            settings.limits.max_upload_bytes,
            settings.limits.max_image_files,
        )
        batch = await images_to_pdf(uploads, conversion_options)
        results = [
            ConvertedFile(**store.save(doc.pdf_name, doc.data).model_dump(), original_name=doc.source_name)
            for doc in batch.documents
        ]
    except Exception as exc:
        _raise_http(request_id, exc, "Image conversion")

    return ConversionResponse(
        message=batch.message,
        results=results,
        succeeded=batch.succeeded,
        failed=batch.failed,
        failures=batch.failures or None,
    )


# ──────────────────────────────────────────────────────────
# PDF operations
# ──────────────────────────────────────────────────────────

async def _single_pdf(file: UploadFile | None) -> Upload:
    uploads = await _read_uploads([file] if file is not None else [])
    return validate_uploads(uploads, PDF_EXTENSIONS, settings.limits.max_upload_bytes, 1)[0]


@app.post("/api/merge-pdfs", response_model=OperationResponse, response_model_exclude_none=True)
async def merge(files: list[UploadFile] | None = File(None, description="Two or more PDFs")):
    request_id = uuid.uuid4().hex[:12]
    logger.info("[%s] POST /api/merge-pdfs — %d files", request_id, len(files or []))

    try:
        uploads = validate_uploads(
            await _read_uploads(files),
            PDF_EXTENSIONS,
            settings.limits.max_upload_bytes,
            settings.limits.max_pdf_files,
            min_count=2,
        )
        pdf_bytes, page_count = merge_pdfs(uploads)
        stored = store.save(f"merged_{timestamp_ms()}.pdf", pdf_bytes)
    except Exception as exc:
        _raise_http(request_id, exc, "PDF merge")

    return OperationResponse(
        message=f"Successfully merged {len(uploads)} PDF files",
        result=PdfResult(**stored.model_dump(), page_count=page_count),
    )


@app.post("/api/split-pdf", response_model=OperationResponse, response_model_exclude_none=True)
async def split(
    file: UploadFile | None = File(None, description="PDF to extract pages from"),
    page_ranges: str = Form("", alias="pageRanges", description="e.g. 1,3,5-7"),
):
    request_id = uuid.uuid4().hex[:12]
    logger.info("[%s] POST /api/split-pdf — ranges=%r", request_id, page_ranges)

    try:
        upload = await _single_pdf(file)
        pdf_bytes, pages = split_pdf(upload, page_ranges)
        stored = store.save(f"{_stem(upload.filename)}_extracted_{timestamp_ms()}.pdf", pdf_bytes)
    except Exception as exc:
        _raise_http(request_id, exc, "PDF split")

    return OperationResponse(
        message=f"Successfully extracted {len(pages)} pages from PDF",
        result=PdfResult(**stored.model_dump(), page_count=len(pages), extracted_pages=pages),
    )


@app.post("/api/add-watermark", response_model=OperationResponse, response_model_exclude_none=True)
async def watermark(
    file: UploadFile | None = File(None, description="PDF to watermark"),
    text: str = Form("CONFIDENTIAL"),
    color: str = Form("#FF0000"),
    opacity: float = Form(0.3),
    font_size: int = Form(50, alias="fontSize"),
    diagonal: bool = Form(False),
    repeat: bool = Form(False),
):
    request_id = uuid.uuid4().hex[:12]
    logger.info("[%s] POST /api/add-watermark — %r diagonal=%s repeat=%s", request_id, text, diagonal, repeat)

    try:
        wm_options = build_options(
            WatermarkOptions,
            text=text, color=color, opacity=opacity,
            font_size=font_size, diagonal=diagonal, repeat=repeat,
        )
        upload = await _single_pdf(file)
        pdf_bytes, page_count = add_watermark(upload, wm_options)
        stored = store.save(f"{_stem(upload.filename)}_watermarked_{timestamp_ms()}.pdf", pdf_bytes)
    except Exception as exc:
        _raise_http(request_id, exc, "PDF watermark")

    return OperationResponse(
        message="Successfully added watermark to PDF",
        result=PdfResult(**stored.model_dump(), page_count=page_count),
    )


@app.post("/api/protect-pdf", response_model=OperationResponse, response_model_exclude_none=True)
async def protect(
    file: UploadFile | None = File(None, description="PDF to protect"),
    user_password: str | None = Form(None, alias="userPassword"),
    owner_password: str | None = Form(None, alias="ownerPassword"),
    allow_printing: bool = Form(False, alias="allowPrinting"),
    allow_modifying: bool = Form(False, alias="allowModifying"),
    allow_copying: bool = Form(False, alias="allowCopying"),
    allow_annotating: bool = Form(False, alias="allowAnnotating"),
    allow_filling_forms: bool = Form(True, alias="allowFillingForms"),
    allow_accessibility: bool = Form(True, alias="allowAccessibility"),
    allow_assembly: bool = Form(False, alias="allowAssembly"),
):
    request_id = uuid.uuid4().hex[:12]
    logger.info("[%s] POST /api/protect-pdf", request_id)

    try:
        if not user_password:
            raise InvalidOptionsError(["User password is required"])
        protect_options = build_options(
            ProtectOptions,
            user_password=user_password,
            owner_password=owner_password or None,
            allow_printing=allow_printing,
            allow_modifying=allow_modifying,
            allow_copying=allow_copying,
            allow_annotating=allow_annotating,
            allow_filling_forms=allow_filling_forms,
            allow_accessibility=allow_accessibility,
            allow_assembly=allow_assembly,
        )
        upload = await _single_pdf(file)
        pdf_bytes, page_count = protect_pdf(upload, protect_options)
        stored = store.save(f"{_stem(upload.filename)}_protected_{timestamp_ms()}.pdf", pdf_bytes)
    except Exception as exc:
        _raise_http(request_id, exc, "PDF protection")

    return OperationResponse(
        message="Successfully password-protected the PDF",
        result=PdfResult(**stored.model_dump(), page_count=page_count, is_protected=True),
    )


# ──────────────────────────────────────────────────────────
# Downloads
# ──────────────────────────────────────────────────────────

def _download(filename: str) -> FileResponse:
    try:
        path = store.resolve(filename)
    except DocPressError as exc:
        logger.warning("Download miss: %s", filename)
        raise HTTPException(status_code=exc.status_code, detail=exc.to_dict()) from exc
    return FileResponse(path, media_type="application/pdf", filename=path.name)


@app.api_route("/api/download/{filename}", methods=["GET", "HEAD"])
async def download(filename: str):
    logger.info("Download request for file: %s", filename)
    return _download(filename)


@app.get("/output/{filename}")
async def output_file(filename: str):
    return _download(filename)


@app.get("/api/list-files")
async def list_files():
    return {"success": True, "files": store.list_files()}


# ──────────────────────────────────────────────────────────
# Front end (mounted LAST so it doesn't override API routes)
# ──────────────────────────────────────────────────────────

if settings.static_dir.is_dir():
    logger.info("  Frontend found at: %s", settings.static_dir)
    app.mount("/", StaticFiles(directory=str(settings.static_dir), html=True), name="frontend")
else:
    logger.warning("  Frontend not found at %s. Root will return 404.", settings.static_dir)
