"""
DocPress — Response contracts.

Serialized with camelCase keys for the browser front end.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StoredFile(_CamelModel):
    id: str
    pdf_name: str
    pdf_path: str
    size: int


class ConvertedFile(StoredFile):
    original_name: str


class ConversionResponse(_CamelModel):
    success: bool = True
    message: str
    results: list[ConvertedFile]
    succeeded: int | None = None
    failed: int | None = None
    failures: list[str] | None = None


class PdfResult(StoredFile):
    page_count: int
    extracted_pages: list[int] | None = None
    is_protected: bool | None = None


class OperationResponse(_CamelModel):
    success: bool = True
    message: str
    result: PdfResult
