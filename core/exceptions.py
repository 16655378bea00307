from fastapi import Request
from fastapi.responses import JSONResponse

from models.json_response import JsonData

# 用户可见的统一提示
ANALYSIS_FAILED_MESSAGE = "Đã xảy ra lỗi khi phân tích hình ảnh. Vui lòng thử lại."
EXPORT_FAILED_MESSAGE = "Không thể tạo file Word. Vui lòng thử lại."


class AnalysisError(Exception):
    """图像分析流水线异常基类"""

    user_message: str = ANALYSIS_FAILED_MESSAGE


class EncodingError(AnalysisError):
    """图像读取或 base64 编码失败"""


class UnsupportedMediaTypeError(AnalysisError):
    """不支持的图像类型"""


class TransportError(AnalysisError):
    """网络、鉴权或缺少密钥导致的调用失败"""


class EmptyResponseError(AnalysisError):
    """模型没有返回任何文本"""


class SchemaViolationError(AnalysisError):
    """模型返回的内容不符合约定的 JSON 结构"""


class ExportError(Exception):
    """Word 文档生成失败，与分析流程相互独立"""

    user_message: str = EXPORT_FAILED_MESSAGE


class ExportNotReadyError(ExportError):
    """还没有可导出的分析结果"""

    user_message: str = "Chưa có kết quả phân tích để xuất."


class ApiException(Exception):
    """接口层异常，统一转换为 JsonData 错误响应"""

    def __init__(self, msg: str, status_code: int = 400, code: int = -1):
        super().__init__(msg)
        self.msg = msg
        self.status_code = status_code
        self.code = code


async def api_exception_handler(request: Request, exc: ApiException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=JsonData.error(msg=exc.msg, code=exc.code).model_dump()
    )
