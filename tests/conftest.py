import os

# 测试时日志输出到 stderr，不写 app.log；不读取真实密钥
os.environ["LOG_FILE"] = ""
os.environ.pop("VISION_API_KEY", None)

from types import SimpleNamespace

import pytest

from models.analysis import AnalysisResult, ImageBlob

PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01"
    b"\x08\x06\x00\x00\x00\x1f\x15\xc4\x89\x00\x00\x00\rIDATx\x9cc\xf8\x0f"
    b"\x00\x00\x01\x01\x00\x05\x18\xd8N\x00\x00\x00\x00IEND\xaeB`\x82"
)


def make_response(content, refusal=None):
    """构造与 openai ChatCompletion 结构一致的假响应"""
    message = SimpleNamespace(content=content, refusal=refusal)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeCompletions:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    async def create(self, **params):
        self.calls.append(params)
        if self.error is not None:
            raise self.error
        return self.response


class FakeAsyncClient:
    """替代 AsyncOpenAI，只实现 chat.completions.create"""

    def __init__(self, response=None, error=None):
        self.completions = FakeCompletions(response, error)
        self.chat = SimpleNamespace(completions=self.completions)


@pytest.fixture
def png_blob():
    return ImageBlob(data=PNG_BYTES, media_type="image/png", filename="scan.png")


@pytest.fixture
def jpg_blob():
    return ImageBlob(data=b"\xff\xd8\xff\xe0fake-jpeg\xff\xd9", media_type="image/jpeg", filename="photo.jpg")


@pytest.fixture
def greeting_result():
    return AnalysisResult(extractedText="Hello", description="A greeting card")
