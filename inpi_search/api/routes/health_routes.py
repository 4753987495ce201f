"""헬스 체크 엔드포인트 (토큰 불필요)"""
from datetime import datetime

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from inpi_search import __version__
from inpi_search.schemas.inpi_schema import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/", response_class=PlainTextResponse)
async def root():
    """루트 엔드포인트"""
    return "ok"


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """헬스 체크 엔드포인트"""
    return HealthResponse(
        ok=True,
        timestamp=datetime.now(),
        version=__version__
    )
