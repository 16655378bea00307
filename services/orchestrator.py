import asyncio
import logging
from typing import Callable, Optional

from core.exceptions import ANALYSIS_FAILED_MESSAGE, ExportError, ExportNotReadyError
from models.analysis import AnalysisResult, ExportedDocument, ImageBlob
from models.state import AnalysisState, RequestStatus
from services.analysis_client import BaseAnalysisClient
from services.docx_service import export_report

logger = logging.getLogger(__name__)

Exporter = Callable[[AnalysisResult, str], ExportedDocument]


class AnalysisSession:
    """
    单个会话的分析状态机

    IDLE -> SELECTED -> ANALYZING -> COMPLETED / FAILED
    每次 select/clear 都会递增 generation，分析请求完成时
    generation 不一致说明用户已经换了图片，结果直接丢弃。
    同一会话同时最多只有一个请求在进行，旧请求未返回前 analyze 不做任何事。
    """

    def __init__(self, client: BaseAnalysisClient, exporter: Exporter = export_report):
        self.client = client
        self.exporter = exporter
        self._blob: Optional[ImageBlob] = None
        self._status = RequestStatus.IDLE
        self._result: Optional[AnalysisResult] = None
        self._error: Optional[str] = None
        self._export_error: Optional[str] = None
        self._generation = 0
        self._in_flight = False

    @property
    def blob(self) -> Optional[ImageBlob]:
        return self._blob

    @property
    def status(self) -> RequestStatus:
        return self._status

    @property
    def state(self) -> AnalysisState:
        return AnalysisState(
            status=self._status,
            filename=self._blob.filename if self._blob else None,
            media_type=self._blob.media_type if self._blob else None,
            result=self._result,
            error=self._error,
            export_error=self._export_error,
            in_flight=self._in_flight
        )

    def select(self, blob: ImageBlob) -> AnalysisState:
        """选择新图片，清空之前的结果和错误"""
        self._generation += 1
        if self._in_flight:
            logger.info(f"分析进行中时选择了新图片，旧结果将被丢弃: {blob.filename}")
        self._blob = blob
        self._status = RequestStatus.SELECTED
        self._result = None
        self._error = None
        self._export_error = None
        logger.info(f"已选择图片: {blob.filename} ({blob.media_type}, {blob.size} bytes)")
        return self.state

    def clear(self) -> AnalysisState:
        self._generation += 1
        self._blob = None
        self._status = RequestStatus.IDLE
        self._result = None
        self._error = None
        self._export_error = None
        return self.state

    def _is_stale(self, generation: int) -> bool:
        return generation != self._generation

    async def analyze(self) -> AnalysisState:
        """分析当前图片；没有图片或正在分析时不做任何事"""
        if self._blob is None:
            logger.info("没有选择图片，忽略分析请求")
            return self.state
        if self._in_flight:
            logger.info("已有分析正在进行，忽略重复请求")
            return self.state

        blob = self._blob
        generation = self._generation
        self._status = RequestStatus.ANALYZING
        self._result = None
        self._error = None
        self._export_error = None
        self._in_flight = True
        logger.info(f"开始分析图片: {blob.filename}")

        result = None
        try:
            result = await self.client.analyze_image(blob)
        except asyncio.CancelledError:
            # 请求被取消时回到 SELECTED，允许重新分析
            if not self._is_stale(generation):
                logger.warning(f"图像分析被取消: {blob.filename}")
                self._status = RequestStatus.SELECTED
            raise
        except Exception as e:
            if self._is_stale(generation):
                logger.info(f"丢弃过期的分析失败结果: {blob.filename}, {e}")
            else:
                logger.error(f"图像分析失败: {blob.filename}, {e}", exc_info=True)
                self._status = RequestStatus.FAILED
                self._error = getattr(e, "user_message", ANALYSIS_FAILED_MESSAGE)
        finally:
            self._in_flight = False

        if result is None:
            return self.state

        if self._is_stale(generation):
            logger.info(f"丢弃过期的分析结果: {blob.filename}")
            return self.state

        self._status = RequestStatus.COMPLETED
        self._result = result
        logger.info(f"图像分析完成: {blob.filename}")
        return self.state

    def export(self) -> ExportedDocument:
        """
        导出 Word 文档，只在 COMPLETED 状态下可用

        Raises:
            ExportNotReadyError: 还没有分析结果
            ExportError: 文档生成失败（状态不变）
        """
        if self._status != RequestStatus.COMPLETED or self._result is None or self._blob is None:
            raise ExportNotReadyError("Chưa có kết quả phân tích để xuất.")

        try:
            document = self.exporter(self._result, self._blob.filename)
        except ExportError as e:
            self._export_error = e.user_message
            raise

        self._export_error = None
        return document
