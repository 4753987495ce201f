"""Pydantic 스키마 정의"""
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class ConsultaRequest(BaseModel):
    """INPI 상표 검색 요청

    길이(2자 이상) 검증은 라우트에서 trim 후 수행하여 400으로 응답합니다.
    """
    marca: str = Field("", max_length=500, description="검색할 상표명")

    @field_validator("marca", mode="before")
    @classmethod
    def coerce_marca(cls, v: Any) -> str:
        if v is None:
            return ""
        return str(v).strip()


class ConsultaResponse(BaseModel):
    """INPI 상표 검색 응답"""
    ok: bool = Field(True, description="성공 여부")
    marca: str = Field(..., description="실제로 검색한 상표명 (trim 후)")
    html: str = Field(..., description="결과 페이지 원본 HTML")
    classification: str = Field(..., description="valid_results | valid_empty | unrecognized")
    steps_completed: int = Field(..., ge=0, description="완료된 내비게이션 단계 수")
    flagged: bool = Field(..., description="결과 페이지 형태가 예상과 다름")
    elapsed_ms: float = Field(..., ge=0, description="소요 시간 (밀리초)")


class ErrorResponse(BaseModel):
    """오류 응답"""
    ok: bool = Field(False, description="항상 false")
    error: str = Field(..., description="오류 메시지")
    kind: Optional[str] = Field(None, description="실패 분류 (워크플로우 실패 시)")
    last_completed_step: Optional[str] = Field(None, description="실패 직전 도달 상태")


class HealthResponse(BaseModel):
    """헬스 체크 응답"""
    ok: bool = Field(True, description="서버 상태")
    timestamp: datetime = Field(..., description="응답 시각")
    version: str = Field(..., description="서비스 버전")
