from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr

# 空结果在界面和文档中的占位文字
NO_TEXT_PLACEHOLDER = "(Không tìm thấy văn bản trong hình ảnh)"
NO_DESCRIPTION_PLACEHOLDER = "(Không có mô tả)"


class ImageBlob(BaseModel):
    """用户选择的图像（二进制 + 声明的媒体类型），选定后不可变"""
    model_config = ConfigDict(frozen=True)

    data: bytes = Field(..., description="图像二进制")
    media_type: str = Field(..., description="媒体类型，例如 image/png")
    filename: str = Field(default="image", description="原始文件名")

    @property
    def size(self) -> int:
        return len(self.data)


class AnalysisResult(BaseModel):
    """模型返回的结构化分析结果，两个字段都必须存在，空字符串表示没有内容"""
    model_config = ConfigDict(frozen=True)

    extracted_text: StrictStr = Field(
        ...,
        alias="extractedText",
        description="Toàn bộ văn bản được trích xuất từ hình ảnh."
    )
    description: StrictStr = Field(
        ...,
        description="Mô tả chi tiết nội dung, ý nghĩa và bối cảnh của hình ảnh."
    )

    def display_text(self) -> str:
        return self.extracted_text or NO_TEXT_PLACEHOLDER

    def display_description(self) -> str:
        return self.description or NO_DESCRIPTION_PLACEHOLDER


class ExportedDocument(BaseModel):
    """导出的 Word 文档"""
    filename: str
    content: bytes
    media_type: str = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


class AnalysisView(BaseModel):
    """返回给前端的结果视图（空字段替换为占位文字）"""
    extracted_text: str
    description: str
    has_text: bool

    @classmethod
    def from_result(cls, result: Optional[AnalysisResult]) -> Optional["AnalysisView"]:
        if result is None:
            return None
        return cls(
            extracted_text=result.display_text(),
            description=result.display_description(),
            has_text=bool(result.extracted_text)
        )
