"""FastAPI 앱 팩토리"""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from inpi_search.core.config import Settings, get_settings
from inpi_search.core.logging import logger, sanitize_for_log, setup_logging
from inpi_search.core.security import TOKEN_HEADER, is_valid_internal_token
from inpi_search.api import health_router, inpi_router
from inpi_search.api.middleware import RequestSizeLimitMiddleware
from inpi_search.api.routes.inpi_routes import INVALID_MARCA_MESSAGE
from inpi_search.services import InpiRetrievalService


# 토큰 없이 허용하는 메서드 (/, /health, CORS preflight)
_OPEN_METHODS = {"GET", "HEAD", "OPTIONS"}

CORS_BLOCKED_MESSAGE = "CORS blocked"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """애플리케이션 생명주기"""
    logger.info(f"INPI API starting (browser concurrency={app.state.settings.crawler_browser_concurrency})")
    yield
    logger.info("Shutting down INPI API...")


def create_app(
    settings: Optional[Settings] = None,
    retrieval_service: Optional[InpiRetrievalService] = None,
) -> FastAPI:
    """
    FastAPI 앱 생성 (Factory Pattern)

    Args:
        settings: 설정 (없으면 환경 변수에서 로드)
        retrieval_service: 조회 서비스 (테스트에서 주입)

    Returns:
        FastAPI 앱 인스턴스
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(
        title=settings.api_title,
        description=settings.api_description,
        version=settings.api_version,
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.retrieval_service = retrieval_service or InpiRetrievalService(settings)
    allowed_origins = set(settings.cors_origins)

    @app.middleware("http")
    async def internal_token_gate(request: Request, call_next):
        if request.method not in _OPEN_METHODS:
            if not is_valid_internal_token(request.headers.get(TOKEN_HEADER), settings.internal_api_token):
                return JSONResponse(status_code=401, content={"ok": False, "error": "Unauthorized"})
        return await call_next(request)

    @app.middleware("http")
    async def origin_allowlist(request: Request, call_next):
        origin = request.headers.get("origin")
        if origin and origin not in allowed_origins:
            logger.warning(f"[API] Blocked origin: {sanitize_for_log(origin)}")
            return JSONResponse(status_code=403, content={"ok": False, "error": CORS_BLOCKED_MESSAGE})
        return await call_next(request)

    # chunked 본문까지 수신 바이트로 제한
    app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_request_bytes)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"ok": False, "error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def invalid_body_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"[API] Invalid request body: {exc.errors()}")
        return JSONResponse(status_code=400, content={"ok": False, "error": INVALID_MARCA_MESSAGE})

    # CORS (가장 바깥 미들웨어)
    # Origin 헤더가 없는 server-to-server 요청은 CORS 대상이 아님, 목록 밖 Origin은 위에서 403
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", TOKEN_HEADER],
        max_age=86400,
    )

    # 라우터 등록
    app.include_router(health_router)
    app.include_router(inpi_router)

    return app
