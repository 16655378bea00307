from enum import Enum
from typing import Optional

from pydantic import BaseModel

from models.analysis import AnalysisResult


class RequestStatus(str, Enum):
    IDLE = "IDLE"
    SELECTED = "SELECTED"
    ANALYZING = "ANALYZING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class AnalysisState(BaseModel):
    """会话状态快照"""
    status: RequestStatus = RequestStatus.IDLE
    filename: Optional[str] = None
    media_type: Optional[str] = None
    result: Optional[AnalysisResult] = None
    error: Optional[str] = None
    export_error: Optional[str] = None
    in_flight: bool = False

    @property
    def is_loading(self) -> bool:
        return self.status == RequestStatus.ANALYZING

    @property
    def can_analyze(self) -> bool:
        return self.filename is not None and not self.is_loading and not self.in_flight

    @property
    def can_export(self) -> bool:
        return self.status == RequestStatus.COMPLETED and self.result is not None
