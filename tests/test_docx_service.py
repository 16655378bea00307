import io
from datetime import datetime

import docx
import pytest

from core.exceptions import ExportError
from models.analysis import AnalysisResult
from services import docx_service
from services.docx_service import (
    DESCRIPTION_SECTION_TITLE,
    FOOTER_CREDIT,
    REPORT_TITLE,
    TEXT_SECTION_TITLE,
    export_filename,
    export_report,
)


@pytest.mark.parametrize("original, expected", [
    ("photo.jpg", "photo_phan_tich.docx"),
    ("scan.final.png", "scan.final_phan_tich.docx"),
    ("noextension", "noextension_phan_tich.docx"),
])
def test_export_filename(original, expected):
    assert export_filename(original) == expected


def paragraph_texts(content: bytes):
    document = docx.Document(io.BytesIO(content))
    return [p.text for p in document.paragraphs]


def test_export_report_contains_sections(greeting_result):
    exported = export_report(greeting_result, "photo.jpg", generated_at=datetime(2026, 10, 19, 9, 30))

    assert exported.filename == "photo_phan_tich.docx"
    texts = paragraph_texts(exported.content)
    assert texts[0] == REPORT_TITLE
    assert TEXT_SECTION_TITLE in texts
    assert DESCRIPTION_SECTION_TITLE in texts
    assert "Hello" in texts
    assert "A greeting card" in texts
    assert texts[-1].startswith(FOOTER_CREDIT)
    assert "19/10/2026" in texts[-1]


def test_export_report_uses_placeholders_for_empty_fields():
    result = AnalysisResult(extractedText="", description="")
    texts = paragraph_texts(export_report(result, "scan.png").content)

    assert "(Không tìm thấy văn bản trong hình ảnh)" in texts
    assert "(Không có mô tả)" in texts


def test_export_failure_raises_export_error(greeting_result, monkeypatch):
    def broken(result, generated_at=None):
        raise ValueError("broken document")

    monkeypatch.setattr(docx_service, "build_report", broken)
    with pytest.raises(ExportError):
        export_report(greeting_result, "photo.jpg")
