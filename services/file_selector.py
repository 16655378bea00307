import logging
import mimetypes
from pathlib import Path
from typing import Iterable, Optional, Union

from fastapi import UploadFile

from core.config import settings
from core.exceptions import EncodingError, UnsupportedMediaTypeError
from models.analysis import ImageBlob

logger = logging.getLogger(__name__)

# 远端多模态模型支持的图像类型
ACCEPTED_MEDIA_TYPES = {
    "image/png",
    "image/jpeg",
    "image/webp",
    "image/gif",
    "image/heic",
    "image/heif",
}

_MEDIA_TYPE_ALIASES = {
    "image/jpg": "image/jpeg",
    "image/pjpeg": "image/jpeg",
}


def normalize_media_type(media_type: Optional[str]) -> str:
    value = (media_type or "").split(";")[0].strip().lower()
    return _MEDIA_TYPE_ALIASES.get(value, value)


def guess_media_type(filename: str) -> str:
    media_type, _ = mimetypes.guess_type(filename)
    return normalize_media_type(media_type)


def is_image(media_type: Optional[str]) -> bool:
    return normalize_media_type(media_type).startswith("image/")


def ensure_accepted(media_type: Optional[str]) -> str:
    """校验媒体类型，返回规范化后的类型"""
    value = normalize_media_type(media_type)
    if value not in ACCEPTED_MEDIA_TYPES:
        raise UnsupportedMediaTypeError(
            f"不支持的文件类型: {value or '未知'}。支持的格式: {', '.join(sorted(ACCEPTED_MEDIA_TYPES))}"
        )
    return value


def build_blob(data: bytes, media_type: Optional[str], filename: str,
               max_bytes: Optional[int] = None) -> ImageBlob:
    """根据二进制和声明的类型构建 ImageBlob"""
    limit = settings.MAX_IMAGE_BYTES if max_bytes is None else max_bytes
    declared = media_type if is_image(media_type) else guess_media_type(filename)
    value = ensure_accepted(declared)
    if not data:
        raise EncodingError(f"文件内容为空: {filename}")
    if len(data) > limit:
        raise EncodingError(f"文件过大: {filename} ({len(data)} bytes, 上限 {limit} bytes)")
    return ImageBlob(data=data, media_type=value, filename=filename)


def first_image(files: Iterable[UploadFile]) -> Optional[UploadFile]:
    """拖放多个文件时只取第一个，且必须是图像"""
    files = list(files)
    if not files:
        return None

    file = files[0]
    if not is_image(file.content_type):
        logger.info(f"忽略非图像文件: {file.filename} ({file.content_type})")
        return None
    return file


async def blob_from_upload(upload: UploadFile, max_bytes: Optional[int] = None) -> ImageBlob:
    """读取上传文件"""
    filename = upload.filename or "image"
    limit = settings.MAX_IMAGE_BYTES if max_bytes is None else max_bytes
    if upload.size is not None and upload.size > limit:
        raise EncodingError(f"文件过大: {filename} ({upload.size} bytes, 上限 {limit} bytes)")

    try:
        data = await upload.read()
    except OSError as e:
        logger.error(f"读取上传文件失败: {filename}, {e}")
        raise EncodingError(f"读取上传文件失败: {filename}") from e

    return build_blob(data, upload.content_type, filename, max_bytes=limit)


def load_image_file(path: Union[str, Path], max_bytes: Optional[int] = None) -> ImageBlob:
    """从本地路径读取图像"""
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        logger.error(f"读取图像文件失败: {path}, {e}")
        raise EncodingError(f"读取图像文件失败: {path}") from e

    return build_blob(data, guess_media_type(path.name), path.name, max_bytes=max_bytes)
