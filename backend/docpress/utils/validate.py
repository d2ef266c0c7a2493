"""
DocPress — Upload validation.

Checks file counts, extensions and sizes before any conversion runs.
"""

from __future__ import annotations

from docpress.errors import (
    FileTooLargeError,
    NoFilesError,
    TooManyFilesError,
    UnsupportedFileTypeError,
)
from docpress.models.uploads import Upload

WORD_EXTENSIONS = [".doc", ".docx"]
IMAGE_EXTENSIONS = [".jpg", ".jpeg", ".png", ".bmp", ".webp", ".svg"]
PDF_EXTENSIONS = [".pdf"]


def validate_uploads(
    uploads: list[Upload],
    allowed: list[str],
    max_bytes: int,
    max_count: int,
    min_count: int = 1,
) -> list[Upload]:
    """
    Validate a batch of uploads.
    Returns the uploads unchanged. Raises DocPressError subclasses on failure.
    """
    if len(uploads) < min_count:
        raise NoFilesError(minimum=min_count)
    if len(uploads) > max_count:
        raise TooManyFilesError(len(uploads), max_count)

    for upload in uploads:
        if upload.extension not in allowed:
            raise UnsupportedFileTypeError(upload.filename, upload.extension, allowed)
        if upload.size > max_bytes:
            raise FileTooLargeError(
                upload.filename,
                upload.size / (1024 * 1024),
                max_bytes / (1024 * 1024),
            )
    return uploads
