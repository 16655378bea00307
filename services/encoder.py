import asyncio
import base64
import binascii
import logging

from core.exceptions import EncodingError
from models.analysis import ImageBlob

logger = logging.getLogger(__name__)


def data_url_prefix(media_type: str) -> str:
    return f"data:{media_type};base64,"


def to_data_url(data: bytes, media_type: str) -> str:
    """生成 data URL，例如 data:image/png;base64,xxxx"""
    b64 = base64.b64encode(data).decode("utf-8")
    return data_url_prefix(media_type) + b64


def _encode(blob: ImageBlob) -> str:
    data_url = to_data_url(blob.data, blob.media_type)
    # 去掉 data URL 前缀，只保留 base64 部分
    _, _, payload = data_url.partition(",")
    return payload


async def encode_image(blob: ImageBlob) -> str:
    """
    将图像编码为 base64 文本

    Args:
        blob: 已选择的图像

    Returns:
        不带 data URL 前缀的 base64 字符串

    Raises:
        EncodingError: 图像为空或编码失败
    """
    if not blob.data:
        raise EncodingError(f"图像内容为空: {blob.filename}")

    try:
        payload = await asyncio.to_thread(_encode, blob)
    except (binascii.Error, TypeError, ValueError, MemoryError) as e:
        logger.error(f"图像编码失败: {blob.filename}, {e}")
        raise EncodingError(f"图像编码失败: {blob.filename}") from e

    if not payload:
        raise EncodingError(f"图像编码结果为空: {blob.filename}")
    return payload
