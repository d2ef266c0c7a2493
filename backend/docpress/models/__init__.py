"""DocPress data models — typed contracts for requests, layout and responses."""

from docpress.models.layout import (
    ImageDescriptor,
    PageDimensions,
    Placement,
    WatermarkStamp,
)
from docpress.models.options import (
    ConversionOptions,
    FitPolicy,
    Orientation,
    PageSize,
    ProtectOptions,
    Quality,
    WatermarkOptions,
)
from docpress.models.results import (
    ConversionResponse,
    ConvertedFile,
    OperationResponse,
    PdfResult,
    StoredFile,
)
from docpress.models.uploads import Upload

__all__ = [
    "ImageDescriptor",
    "PageDimensions",
    "Placement",
    "WatermarkStamp",
    "ConversionOptions",
    "FitPolicy",
    "Orientation",
    "PageSize",
    "ProtectOptions",
    "Quality",
    "WatermarkOptions",
    "ConversionResponse",
    "ConvertedFile",
    "OperationResponse",
    "PdfResult",
    "StoredFile",
    "Upload",
]
