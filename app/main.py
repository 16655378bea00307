import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.config import settings
from core.exceptions import ApiException, api_exception_handler
from routers import analysis

app = FastAPI(
    title=settings.APP_NAME,
    description="图像文字识别、内容分析与 Word 导出",
    version="1.0.0"
)

# 开启跨域配置
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(ApiException, api_exception_handler)

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    filename=settings.LOG_FILE,
    format="%(asctime)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    encoding="utf-8"
)

if not settings.VISION_API_KEY:
    logging.warning("VISION_API_KEY 未配置，图像分析请求将会失败")

logging.info(f"{settings.APP_NAME} 服务启动成功")

app.include_router(analysis.router)


@app.get("/")
async def root():
    return {
        "message": f"欢迎使用 {settings.APP_NAME}",
        "version": "1.0.0",
        "model": settings.VISION_MODEL_NAME
    }


# 启动服务
if __name__ == "__main__":
    uvicorn.run("app.main:app", host="127.0.0.1", port=8000)
