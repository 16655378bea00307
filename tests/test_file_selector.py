import asyncio
import io

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from conftest import PNG_BYTES
from core.exceptions import EncodingError, UnsupportedMediaTypeError
from services.file_selector import (
    blob_from_upload,
    build_blob,
    ensure_accepted,
    first_image,
    load_image_file,
)


def make_upload(data: bytes, filename: str, content_type: str) -> UploadFile:
    return UploadFile(file=io.BytesIO(data), filename=filename,
                      headers=Headers({"content-type": content_type}))


def test_ensure_accepted_normalizes_aliases():
    assert ensure_accepted("image/jpg") == "image/jpeg"
    assert ensure_accepted("IMAGE/PNG") == "image/png"


def test_ensure_accepted_rejects_other_types():
    with pytest.raises(UnsupportedMediaTypeError):
        ensure_accepted("application/pdf")
    with pytest.raises(UnsupportedMediaTypeError):
        ensure_accepted(None)


def test_build_blob_guesses_type_from_filename():
    blob = build_blob(PNG_BYTES, "application/octet-stream", "scan.png")
    assert blob.media_type == "image/png"
    assert blob.filename == "scan.png"


def test_build_blob_size_limit():
    with pytest.raises(EncodingError):
        build_blob(b"x" * 11, "image/png", "big.png", max_bytes=10)


def test_first_image_only_considers_first_file():
    image = make_upload(PNG_BYTES, "a.png", "image/png")
    text = make_upload(b"hello", "notes.txt", "text/plain")

    assert first_image([image, text]) is image
    assert first_image([text, image]) is None
    assert first_image([]) is None


def test_blob_from_upload():
    upload = make_upload(PNG_BYTES, "scan.png", "image/png")
    blob = asyncio.run(blob_from_upload(upload))
    assert blob.data == PNG_BYTES
    assert blob.media_type == "image/png"


def test_load_image_file(tmp_path):
    path = tmp_path / "photo.jpg"
    path.write_bytes(b"\xff\xd8\xff\xd9")

    blob = load_image_file(path)
    assert blob.filename == "photo.jpg"
    assert blob.media_type == "image/jpeg"


def test_load_missing_file_fails(tmp_path):
    with pytest.raises(EncodingError):
        load_image_file(tmp_path / "missing.png")


def test_oversized_upload_is_rejected_before_reading():
    upload = UploadFile(file=io.BytesIO(PNG_BYTES), filename="scan.png", size=len(PNG_BYTES),
                        headers=Headers({"content-type": "image/png"}))

    with pytest.raises(EncodingError):
        asyncio.run(blob_from_upload(upload, max_bytes=10))
    assert upload.file.tell() == 0
