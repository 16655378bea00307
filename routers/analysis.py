import logging
from functools import lru_cache
from typing import Any, Dict, List
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import Response

from core.exceptions import AnalysisError, ApiException, ExportError, ExportNotReadyError
from core.llm import get_analysis_client
from models.analysis import AnalysisView
from models.json_response import JsonData
from models.state import AnalysisState
from services.file_selector import blob_from_upload, first_image
from services.orchestrator import AnalysisSession

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/analysis",
    tags=["图像分析与 Word 导出"],
)


@lru_cache
def get_session() -> AnalysisSession:
    """单用户本地会话"""
    return AnalysisSession(get_analysis_client())


def state_view(state: AnalysisState) -> Dict[str, Any]:
    result = AnalysisView.from_result(state.result)
    return {
        "status": state.status.value,
        "filename": state.filename,
        "media_type": state.media_type,
        "is_loading": state.is_loading,
        "can_analyze": state.can_analyze,
        "can_export": state.can_export,
        "result": result.model_dump() if result else None,
        "error": state.error,
        "export_error": state.export_error,
        "in_flight": state.in_flight,
    }


@router.get("")
async def get_state(session: AnalysisSession = Depends(get_session)):
    return JsonData.success(state_view(session.state))


@router.post("/select")
async def select_image(files: List[UploadFile] = File(..., description="图像文件，多个时只取第一个"),
                       session: AnalysisSession = Depends(get_session)):
    upload = first_image(files)
    if upload is None:
        raise ApiException("Vui lòng chọn một tệp hình ảnh.", status_code=400)

    try:
        blob = await blob_from_upload(upload)
    except AnalysisError as e:
        logger.warning(f"上传文件无效: {upload.filename}, {e}")
        raise ApiException(str(e), status_code=400)

    return JsonData.success(state_view(session.select(blob)))


@router.delete("")
async def clear_image(session: AnalysisSession = Depends(get_session)):
    return JsonData.success(state_view(session.clear()))


@router.post("/analyze")
async def analyze_image(session: AnalysisSession = Depends(get_session)):
    state = await session.analyze()
    return JsonData.success(state_view(state))


@router.get("/export")
async def export_document(session: AnalysisSession = Depends(get_session)):
    try:
        document = session.export()
    except ExportNotReadyError as e:
        raise ApiException(e.user_message, status_code=409)
    except ExportError as e:
        raise ApiException(e.user_message, status_code=500)

    return Response(
        content=document.content,
        media_type=document.media_type,
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(document.filename)}"
        }
    )
