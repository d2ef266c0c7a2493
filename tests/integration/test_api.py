"""Integration tests for FastAPI endpoints (contract tests)."""

import io
import json
import sys

import fitz
import pytest
from httpx import AsyncClient, ASGITransport
from docpress.main import app, store
from docpress.office import convert


@pytest.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


def _pdf_file(name, data):
    return ("files", (name, data, "application/pdf"))


@pytest.mark.asyncio
class TestHealthEndpoints:
    async def test_health_returns_ok(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"

    async def test_check_server(self, client):
        resp = await client.get("/api/check-server")
        data = resp.json()
        assert data["directories"]["output"]["exists"] is True
        assert data["directories"]["uploads"]["writable"] is True

    async def test_check_dependencies(self, client):
        resp = await client.get("/api/check-dependencies")
        deps = resp.json()["dependencies"]
        assert deps["pymupdf"]["installed"] is True
        assert "libreoffice" in deps

    async def test_debug_status(self, client):
        resp = await client.get("/api/debug/status")
        assert resp.json()["success"] is True


@pytest.mark.asyncio
class TestConvertImage:
    async def test_combined_conversion(self, client, image_factory):
        files = [("files", (f"p{i}.png", image_factory(), "image/png")) for i in range(2)]
        resp = await client.post(
            "/api/convert-image",
            files=files,
            data={"options": json.dumps({"combine": "combine", "pageSize": "letter"})},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["succeeded"] == 2
        assert len(body["results"]) == 1
        result = body["results"][0]
        assert result["originalName"] == "2 images combined.pdf"
        assert result["pdfPath"] == f"/output/{result['pdfName']}"

        download = await client.get(f"/api/download/{result['pdfName']}")
        assert download.status_code == 200
        assert download.headers["content-type"] == "application/pdf"
        assert "attachment" in download.headers["content-disposition"]
        doc = fitz.open(stream=download.content, filetype="pdf")
        assert len(doc) == 2
        assert (doc[0].rect.width, doc[0].rect.height) == (612, 792)
        doc.close()

    async def test_partial_failure_reported(self, client, image_factory):
        files = [
            ("files", ("ok.png", image_factory(), "image/png")),
            ("files", ("broken.png", b"nope", "image/png")),
        ]
        resp = await client.post("/api/convert-image", files=files, data={"options": '{"combine": false}'})
        assert resp.status_code == 200
        body = resp.json()
        assert body["failed"] == 1
        assert "1 image(s) failed" in body["message"]

    async def test_invalid_fit(self, client, image_factory):
        resp = await client.post(
            "/api/convert-image",
            files=[("files", ("a.png", image_factory(), "image/png"))],
            data={"options": '{"fit": "tile"}'},
        )
        assert resp.status_code == 422
        assert resp.json()["detail"]["error_code"] == "INVALID_FIT_POLICY"

    async def test_wrong_file_type(self, client):
        resp = await client.post("/api/convert-image", files=[("files", ("a.txt", b"x", "text/plain"))])
        assert resp.status_code == 400
        assert resp.json()["detail"]["error_code"] == "UNSUPPORTED_FILE_TYPE"

    async def test_no_files(self, client):
        resp = await client.post("/api/convert-image", data={"options": "{}"})
        assert resp.status_code == 400
        assert resp.json()["detail"]["error_code"] == "NO_FILES"


@pytest.fixture
def docx_factory():
    from docx import Document

    def _make(*paragraphs):
        document = Document()
        for text in paragraphs:
            document.add_paragraph(text)
        buf = io.BytesIO()
        document.save(buf)
        return buf.getvalue()

    return _make


def _docx_file(name, data):
    return ("files", (name, data, "application/vnd.openxmlformats-officedocument.wordprocessingml.document"))


def _fake_soffice(tmp_path, pdf_bytes):
    """Shell stand-in that copies ``pdf_bytes`` out, or exits 1 when the input contains BROKEN."""
    produced = tmp_path / "produced.pdf"
    produced.write_bytes(pdf_bytes)
    script = tmp_path / "fake-soffice"
    # args: --headless --convert-to pdf --outdir DIR INPUT
    script.write_text(
        "#!/bin/sh\n"
        'outdir="$5"; input="$6"\n'
        'if grep -q BROKEN "$input"; then echo broken >&2; exit 1; fi\n'
        'name=$(basename "$input"); stem="${name%.*}"\n'
        f'cp "{produced}" "$outdir/$stem.pdf"\n'
    )
    script.chmod(0o755)
    return str(script)


def _stored_names():
    return {p.name for p in store.output_dir.iterdir()}


@pytest.mark.asyncio
class TestConvertWord:
    async def test_rejects_non_word(self, client):
        resp = await client.post("/api/convert-word", files=[("files", ("a.pdf", b"x", "application/pdf"))])
        assert resp.status_code == 400

    async def test_invalid_options_rejected(self, client, docx_factory):
        resp = await client.post(
            "/api/convert-word",
            files=[_docx_file("report.docx", docx_factory("x"))],
            data={"options": "[1, 2]"},
        )
        assert resp.status_code == 400
        assert resp.json()["detail"]["error_code"] == "INVALID_OPTIONS"

    async def test_fallback_conversion(self, client, monkeypatch, docx_factory):
        monkeypatch.setattr(convert, "find_soffice", lambda configured=None: None)
        resp = await client.post(
            "/api/convert-word",
            files=[_docx_file("report.docx", docx_factory("Quarterly numbers"))],
            data={"options": "{}"},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["succeeded"] == 1
        assert body["failed"] == 0
        assert "failures" not in body
        (result,) = body["results"]
        assert result["originalName"] == "report.docx"
        assert result["pdfName"].startswith("report")
        assert result["pdfName"].endswith(".pdf")
        assert result["pdfPath"] == f"/output/{result['pdfName']}"

        download = await client.get(f"/api/download/{result['pdfName']}")
        assert download.status_code == 200
        doc = fitz.open(stream=download.content, filetype="pdf")
        text = "".join(page.get_text() for page in doc)
        doc.close()
        assert "Converted from: report.docx" in text
        assert "Quarterly numbers" in text

    @pytest.mark.skipif(sys.platform == "win32", reason="uses a shell script stand-in")
    async def test_failing_document_reported_with_successes(self, client, monkeypatch, tmp_path, pdf_factory):
        script = _fake_soffice(tmp_path, pdf_factory(1, "From office"))
        monkeypatch.setattr(convert, "find_soffice", lambda configured=None: script)
        resp = await client.post(
            "/api/convert-word",
            files=[_docx_file("good.docx", b"fine"), _docx_file("bad.docx", b"BROKEN")],
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["succeeded"] == 1
        assert body["failed"] == 1
        assert "1 failed" in body["message"]
        assert [r["originalName"] for r in body["results"]] == ["good.docx"]
        (failure,) = body["failures"]
        assert failure.startswith("bad.docx:")
        assert body["results"][0]["pdfName"] in _stored_names()

    @pytest.mark.skipif(sys.platform == "win32", reason="uses a shell script stand-in")
    async def test_all_documents_failing(self, client, monkeypatch, tmp_path, pdf_factory):
        script = _fake_soffice(tmp_path, pdf_factory())
        monkeypatch.setattr(convert, "find_soffice", lambda configured=None: script)
        before = _stored_names()
        resp = await client.post(
            "/api/convert-word",
            files=[_docx_file("a.docx", b"BROKEN"), _docx_file("b.docx", b"BROKEN too")],
        )
        assert resp.status_code == 500
        detail = resp.json()["detail"]
        assert detail["error_code"] == "CONVERSION_FAILED"
        assert len(detail["detail"]) == 2
        assert _stored_names() == before


@pytest.mark.asyncio
class TestPdfOperations:
    async def test_merge(self, client, pdf_factory):
        resp = await client.post(
            "/api/merge-pdfs",
            files=[_pdf_file("a.pdf", pdf_factory(2)), _pdf_file("b.pdf", pdf_factory(3))],
        )
        assert resp.status_code == 200
        assert resp.json()["result"]["pageCount"] == 5

    async def test_merge_needs_two(self, client, pdf_factory):
        resp = await client.post("/api/merge-pdfs", files=[_pdf_file("a.pdf", pdf_factory())])
        assert resp.status_code == 400

    async def test_split(self, client, pdf_factory):
        resp = await client.post(
            "/api/split-pdf",
            files={"file": ("doc.pdf", pdf_factory(10), "application/pdf")},
            data={"pageRanges": "1,3,5-7"},
        )
        assert resp.status_code == 200
        result = resp.json()["result"]
        assert result["extractedPages"] == [1, 3, 5, 6, 7]
        assert result["pageCount"] == 5
        assert "_extracted_" in result["pdfName"]

    async def test_split_bad_range(self, client, pdf_factory):
        resp = await client.post(
            "/api/split-pdf",
            files={"file": ("doc.pdf", pdf_factory(3), "application/pdf")},
            data={"pageRanges": "2-9"},
        )
        assert resp.status_code == 400
        detail = resp.json()["detail"]
        assert detail["error_code"] == "INVALID_PAGE_RANGE"
        assert "2-9" in detail["message"]

    async def test_watermark(self, client, pdf_factory):
        resp = await client.post(
            "/api/add-watermark",
            files={"file": ("doc.pdf", pdf_factory(2), "application/pdf")},
            data={"text": "DRAFT", "repeat": "true", "fontSize": "30"},
        )
        assert resp.status_code == 200
        assert resp.json()["result"]["pageCount"] == 2

    async def test_watermark_bad_color(self, client, pdf_factory):
        resp = await client.post(
            "/api/add-watermark",
            files={"file": ("doc.pdf", pdf_factory(), "application/pdf")},
            data={"color": "blue"},
        )
        assert resp.status_code == 400
        assert resp.json()["detail"]["error_code"] == "INVALID_OPTIONS"

    async def test_protect(self, client, pdf_factory):
        resp = await client.post(
            "/api/protect-pdf",
            files={"file": ("doc.pdf", pdf_factory(), "application/pdf")},
            data={"userPassword": "s3cret", "allowPrinting": "true"},
        )
        assert resp.status_code == 200
        assert resp.json()["result"]["isProtected"] is True

    async def test_protect_requires_password(self, client, pdf_factory):
        resp = await client.post(
            "/api/protect-pdf",
            files={"file": ("doc.pdf", pdf_factory(), "application/pdf")},
        )
        assert resp.status_code == 400


@pytest.mark.asyncio
class TestDownloads:
    async def test_missing_file_404(self, client):
        resp = await client.get("/api/download/does-not-exist.pdf")
        assert resp.status_code == 404

    async def test_head_request(self, client):
        created = await client.post("/api/debug/convert-text", json={"text": "hello"})
        name = created.json()["result"]["pdfName"]
        resp = await client.head(f"/api/download/{name}")
        assert resp.status_code == 200

    async def test_output_alias_and_listing(self, client):
        created = await client.post("/api/debug/convert-text", json={"text": "listing"})
        name = created.json()["result"]["pdfName"]
        assert (await client.get(f"/output/{name}")).status_code == 200
        listing = (await client.get("/api/list-files")).json()
        assert name in listing["files"]
