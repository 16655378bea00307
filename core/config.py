from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # 应用配置
    APP_NAME: str = "Pic2Word Analyst"
    DEBUG: bool = False
    LOG_FILE: str = "app.log"

    # 多模态配置（OpenAI 兼容接口）
    VISION_API_KEY: Optional[str] = None
    VISION_BASE_URL: str = "https://dashscope.aliyuncs.com/compatible-mode/v1"
    VISION_MODEL_NAME: str = "qwen3-vl-plus"
    VISION_TEMPERATURE: float = 0.1
    VISION_MAX_TOKENS: int = 4000
    VISION_TIMEOUT: float = 120.0

    # 上传与导出配置
    MAX_IMAGE_BYTES: int = 20 * 1024 * 1024
    EXPORT_SUFFIX: str = "_phan_tich"

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
