"""Shared test configuration and fixtures for DocPress test suite."""

import io
import os
import sys
import tempfile
from pathlib import Path

import pytest

# Add backend to Python path so imports work
backend_dir = str(Path(__file__).parent.parent / "backend")
if backend_dir not in sys.path:
    sys.path.insert(0, backend_dir)

# Keep generated files out of the repository
_work_dir = Path(tempfile.mkdtemp(prefix="docpress-tests-"))
os.environ.setdefault("DOCPRESS_OUTPUT_DIR", str(_work_dir / "output"))
os.environ.setdefault("DOCPRESS_UPLOAD_DIR", str(_work_dir / "uploads"))
os.environ.setdefault("DOCPRESS_STATIC_DIR", str(_work_dir / "frontend"))


@pytest.fixture(scope="session")
def project_root():
    return Path(__file__).parent.parent


def make_png(width: int = 200, height: int = 100, mode: str = "RGB") -> bytes:
    from PIL import Image

    color = (255, 0, 0, 128) if mode == "RGBA" else (255, 0, 0)
    buf = io.BytesIO()
    Image.new(mode, (width, height), color).save(buf, format="PNG")
    return buf.getvalue()


def make_pdf(pages: int = 1, text: str = "Hello World") -> bytes:
    import fitz

    doc = fitz.open()
    for i in range(pages):
        page = doc.new_page()
        page.insert_text((72, 72), f"{text} {i + 1}", fontsize=12)
    pdf_bytes = doc.tobytes()
    doc.close()
    return pdf_bytes


@pytest.fixture
def png_bytes():
    return make_png()


@pytest.fixture
def pdf_factory():
    return make_pdf


@pytest.fixture
def image_factory():
    return make_png
