"""
DocPress — Structured error catalog.

Every error has a code, human message, suggested fix and the HTTP
status it maps to. No raw exceptions leak to the frontend.
"""

from __future__ import annotations

from typing import Any


class DocPressError(Exception):
    """Base error with structured code + suggestion."""

    status_code = 400

    def __init__(self, code: str, message: str, suggestion: str = "", detail: Any = None):
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.detail = detail
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "error_code": self.code,
            "message": self.message,
        }
        if self.suggestion:
            d["suggestion"] = self.suggestion
        if self.detail:
            d["detail"] = self.detail
        return d


class InvalidFitPolicyError(DocPressError):
    status_code = 422

    def __init__(self, fit: Any):
        super().__init__(
            code="INVALID_FIT_POLICY",
            message=f"Unknown fit policy: {fit!r}",
            suggestion="Use one of: contain, cover, stretch.",
        )


class DegenerateImageError(DocPressError):
    status_code = 422

    def __init__(self, what: str, width: float, height: float):
        super().__init__(
            code="DEGENERATE_IMAGE",
            message=f"{what} has no area: {width}x{height}",
            suggestion="Width and height must both be greater than zero.",
        )


class InvalidPageRangeError(DocPressError):
    def __init__(self, token: str, reason: str = ""):
        self.token = token
        message = f"Invalid page range: {token!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(
            code="INVALID_PAGE_RANGE",
            message=message,
            suggestion="Use comma-separated pages or ranges, e.g. 1,3,5-7.",
        )


class InvalidOptionsError(DocPressError):
    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(
            code="INVALID_OPTIONS",
            message=f"Invalid options: {'; '.join(errors)}",
            suggestion="Check the options sent with the request.",
            detail=errors,
        )


class NoFilesError(DocPressError):
    def __init__(self, minimum: int = 1):
        message = "No files uploaded" if minimum <= 1 else f"At least {minimum} files are required"
        super().__init__(
            code="NO_FILES",
            message=message,
            suggestion="Attach the files to convert in the 'files' field.",
        )


class TooManyFilesError(DocPressError):
    def __init__(self, count: int, limit: int):
        super().__init__(
            code="TOO_MANY_FILES",
            message=f"{count} files uploaded, at most {limit} are allowed",
            suggestion="Split the upload into smaller batches.",
        )


class UnsupportedFileTypeError(DocPressError):
    def __init__(self, filename: str, ext: str, allowed: list[str]):
        super().__init__(
            code="UNSUPPORTED_FILE_TYPE",
            message=f"Invalid file type: {ext or '(none)'} ({filename})",
            suggestion=f"Allowed types for this conversion: {', '.join(allowed)}.",
        )


class FileTooLargeError(DocPressError):
    status_code = 413

    def __init__(self, filename: str, size_mb: float, limit_mb: float):
        super().__init__(
            code="FILE_TOO_LARGE",
            message=f"File exceeds {limit_mb:g}MB limit: {filename} ({size_mb:.1f}MB)",
            suggestion="Compress or resize the file before uploading.",
        )


class ImageDecodeError(DocPressError):
    status_code = 422

    def __init__(self, filename: str, reason: str):
        super().__init__(
            code="IMAGE_DECODE_FAILED",
            message=f"Could not decode image {filename}: {reason}",
            suggestion="Check that the file is a valid image.",
        )


class InvalidPdfError(DocPressError):
    status_code = 422

    def __init__(self, filename: str, reason: str = ""):
        super().__init__(
            code="INVALID_PDF",
            message=f"Could not read PDF {filename}" + (f": {reason}" if reason else ""),
            suggestion="Upload an unencrypted, well-formed PDF file.",
        )


class ConversionFailedError(DocPressError):
    status_code = 500

    def __init__(self, message: str, failures: list[str] | None = None):
        super().__init__(
            code="CONVERSION_FAILED",
            message=message,
            suggestion="Please check file formats and try again.",
            detail=failures,
        )


class OfficeConversionError(DocPressError):
    status_code = 500

    def __init__(self, filename: str, reason: str):
        super().__init__(
            code="OFFICE_CONVERSION_FAILED",
            message=f"LibreOffice could not convert {filename}: {reason}",
            suggestion="Check the LibreOffice installation or open and re-save the document.",
        )


class FileNotFoundInStoreError(DocPressError):
    status_code = 404

    def __init__(self, filename: str):
        super().__init__(
            code="FILE_NOT_FOUND",
            message=f"File not found: {filename}",
            suggestion="Converted files are removed after the retention period. Convert again.",
        )
