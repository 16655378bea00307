import logging

from core.config import Settings, settings
from services.analysis_client import BaseAnalysisClient, ImageAnalysisClient, UnconfiguredAnalysisClient

logger = logging.getLogger(__name__)


def get_analysis_client(config: Settings = settings) -> BaseAnalysisClient:
    """获取图像分析客户端，缺少密钥时返回不可用的客户端而不是直接报错"""
    if not config.VISION_API_KEY:
        logger.warning("VISION_API_KEY 未配置，图像分析将会失败")
        return UnconfiguredAnalysisClient()

    return ImageAnalysisClient(
        api_key=config.VISION_API_KEY,
        base_url=config.VISION_BASE_URL,
        model=config.VISION_MODEL_NAME,
        temperature=config.VISION_TEMPERATURE,
        max_tokens=config.VISION_MAX_TOKENS,
        timeout=config.VISION_TIMEOUT
    )
