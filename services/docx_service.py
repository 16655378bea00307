import io
import logging
import re
from datetime import datetime
from typing import Optional

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Pt, RGBColor

from core.config import settings
from core.exceptions import ExportError
from models.analysis import AnalysisResult, ExportedDocument

logger = logging.getLogger(__name__)

REPORT_TITLE = "BÁO CÁO PHÂN TÍCH HÌNH ẢNH"
TEXT_SECTION_TITLE = "1. Văn bản trích xuất (OCR)"
DESCRIPTION_SECTION_TITLE = "2. Phân tích nội dung & Bối cảnh"
FOOTER_CREDIT = "Được tạo bởi Pic2Word Analyst"

_EXTENSION_RE = re.compile(r"\.[^/.]+$")


def export_filename(original_filename: str, suffix: Optional[str] = None) -> str:
    """photo.jpg -> photo_phan_tich.docx"""
    suffix = settings.EXPORT_SUFFIX if suffix is None else suffix
    stem = _EXTENSION_RE.sub("", original_filename)
    return f"{stem}{suffix}.docx"


def _add_body(document, text: str):
    paragraph = document.add_paragraph()
    run = paragraph.add_run(text)
    run.font.size = Pt(12)
    paragraph.paragraph_format.space_after = Pt(20)


def build_report(result: AnalysisResult, generated_at: Optional[datetime] = None) -> bytes:
    """生成 Word 报告，返回 docx 二进制"""
    generated_at = generated_at or datetime.now()
    document = Document()

    title = document.add_heading(REPORT_TITLE, level=1)
    title.alignment = WD_ALIGN_PARAGRAPH.CENTER
    title.paragraph_format.space_after = Pt(20)

    document.add_heading(TEXT_SECTION_TITLE, level=2)
    _add_body(document, result.display_text())

    document.add_heading(DESCRIPTION_SECTION_TITLE, level=2)
    _add_body(document, result.display_description())

    footer = document.add_paragraph(FOOTER_CREDIT)
    footer.alignment = WD_ALIGN_PARAGRAPH.CENTER
    footer.paragraph_format.space_before = Pt(40)
    stamp = footer.add_run("\n" + generated_at.strftime("%H:%M:%S %d/%m/%Y"))
    stamp.italic = True
    stamp.font.size = Pt(10)
    stamp.font.color.rgb = RGBColor(0x80, 0x80, 0x80)

    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def export_report(result: AnalysisResult, original_filename: str,
                  generated_at: Optional[datetime] = None) -> ExportedDocument:
    """
    导出分析结果

    Args:
        result: 分析结果
        original_filename: 原始图像文件名
        generated_at: 生成时间，默认当前时间

    Raises:
        ExportError: 文档生成失败
    """
    filename = export_filename(original_filename)
    try:
        content = build_report(result, generated_at=generated_at)
    except Exception as e:
        logger.error(f"生成 Word 文档失败: {filename}, {e}", exc_info=True)
        raise ExportError(f"生成 Word 文档失败: {filename}") from e

    logger.info(f"Word 文档已生成: {filename}, {len(content)} bytes")
    return ExportedDocument(filename=filename, content=content)
