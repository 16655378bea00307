import logging
from typing import Any, Dict, Optional

from openai import AsyncOpenAI, OpenAIError
from pydantic import ValidationError

from core.exceptions import EmptyResponseError, EncodingError, SchemaViolationError, TransportError
from models.analysis import AnalysisResult, ImageBlob
from services.encoder import data_url_prefix, encode_image
from services.file_selector import ensure_accepted

logger = logging.getLogger(__name__)

# 固定提示词，用户不可修改
ANALYSIS_INSTRUCTION = """Bạn là một trợ lý AI chuyên nghiệp chuyên phân tích tài liệu và hình ảnh.
Nhiệm vụ của bạn là:
1. Trích xuất CHÍNH XÁC toàn bộ văn bản có trong hình ảnh (OCR). Giữ nguyên định dạng xuống dòng nếu có thể.
2. Viết một mô tả chi tiết, sâu sắc về nội dung hình ảnh, bối cảnh, và các đối tượng xuất hiện trong ảnh bằng tiếng Việt.

Hãy trả về kết quả dưới dạng JSON."""

# 要求模型按此结构输出
ANALYSIS_RESPONSE_FORMAT: Dict[str, Any] = {
    "type": "json_schema",
    "json_schema": {
        "name": "image_analysis",
        "strict": True,
        "schema": {
            "type": "object",
            "properties": {
                "extractedText": {
                    "type": "string",
                    "description": "Toàn bộ văn bản được trích xuất từ hình ảnh."
                },
                "description": {
                    "type": "string",
                    "description": "Mô tả chi tiết nội dung, ý nghĩa và bối cảnh của hình ảnh."
                }
            },
            "required": ["extractedText", "description"],
            "additionalProperties": False
        }
    }
}


def parse_analysis(text: Optional[str]) -> AnalysisResult:
    """
    校验模型返回的 JSON 文本

    Raises:
        EmptyResponseError: 文本为空
        SchemaViolationError: 不是合法 JSON，或缺少/类型错误的字段
    """
    if text is None or not text.strip():
        raise EmptyResponseError("模型没有返回内容")

    try:
        return AnalysisResult.model_validate_json(text)
    except ValidationError as e:
        logger.error(f"模型返回内容不符合约定结构: {e}")
        raise SchemaViolationError("模型返回内容不符合约定结构") from e


class BaseAnalysisClient:
    """图像分析客户端接口"""

    async def analyze(self, payload: str, media_type: str) -> AnalysisResult:
        raise NotImplementedError

    async def analyze_image(self, blob: ImageBlob) -> AnalysisResult:
        """编码后调用 analyze"""
        payload = await encode_image(blob)
        return await self.analyze(payload, blob.media_type)


class UnconfiguredAnalysisClient(BaseAnalysisClient):
    """未配置密钥时使用，调用时才报错"""

    def __init__(self, reason: str = "VISION_API_KEY 未配置"):
        self.reason = reason

    async def analyze(self, payload: str, media_type: str) -> AnalysisResult:
        logger.error(f"图像分析客户端不可用: {self.reason}")
        raise TransportError(self.reason)


class ImageAnalysisClient(BaseAnalysisClient):
    """通过 OpenAI 兼容接口调用多模态模型，要求结构化输出"""

    def __init__(self,
                 api_key: str,
                 base_url: Optional[str] = None,
                 model: str = "qwen3-vl-plus",
                 temperature: float = 0.1,
                 max_tokens: int = 4000,
                 timeout: float = 120.0,
                 async_client: Optional[Any] = None):
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        # 不做重试
        self.async_client = async_client or AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=0
        )

    def build_messages(self, payload: str, media_type: str):
        return [
            {
                "role": "user",
                "content": [
                    {
                        "type": "image_url",
                        "image_url": {
                            "url": data_url_prefix(media_type) + payload
                        }
                    },
                    {
                        "type": "text",
                        "text": ANALYSIS_INSTRUCTION
                    }
                ]
            }
        ]

    def build_params(self, payload: str, media_type: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": self.build_messages(payload, media_type),
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "response_format": ANALYSIS_RESPONSE_FORMAT
        }

    async def analyze(self, payload: str, media_type: str) -> AnalysisResult:
        if not payload:
            raise EncodingError("图像编码内容为空")
        media_type = ensure_accepted(media_type)

        params = self.build_params(payload, media_type)
        logger.info(f"调用多模态模型: {self.model}, 类型: {media_type}, 大小: {len(payload)}")

        try:
            response = await self.async_client.chat.completions.create(**params)
        except OpenAIError as e:
            logger.error(f"多模态模型调用失败: {e}")
            raise TransportError(f"多模态模型调用失败: {e}") from e

        return parse_analysis(self._response_text(response))

    @staticmethod
    def _response_text(response: Any) -> Optional[str]:
        choices = getattr(response, "choices", None)
        if not choices:
            raise EmptyResponseError("模型没有返回任何结果")

        message = choices[0].message
        refusal = getattr(message, "refusal", None)
        if refusal:
            logger.warning(f"模型拒绝回答: {refusal}")
            raise EmptyResponseError("模型拒绝回答")
        return message.content
