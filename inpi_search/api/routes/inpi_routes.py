"""INPI Routes - HTTP 요청을 RetrievalWorkflow로 위임하는 Translator"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from inpi_search.core.exceptions import InvalidSearchTermException, RetrievalError
from inpi_search.core.logging import logger
from inpi_search.core.security import new_request_id
from inpi_search.engine import FailureKind, validate_search_term
from inpi_search.schemas.inpi_schema import ConsultaRequest, ConsultaResponse, ErrorResponse
from inpi_search.services import InpiRetrievalService

router = APIRouter(tags=["inpi"])

INVALID_MARCA_MESSAGE = "Invalid 'marca'"

# 원격이 느리거나 deadline 초과 → 504, 그 외 워크플로우 실패 → 502
_GATEWAY_TIMEOUT_KINDS = {FailureKind.TIMEOUT, FailureKind.CANCELLED}


def get_retrieval_service(request: Request) -> InpiRetrievalService:
    """앱 생성 시 만든 서비스 인스턴스"""
    return request.app.state.retrieval_service


def error_response(status_code: int, error: str, **extra) -> JSONResponse:
    body = ErrorResponse(error=error, **extra)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@router.post(
    "/consulta-inpi",
    response_model=ConsultaResponse,
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}, 504: {"model": ErrorResponse}},
)
async def consulta_inpi(
    payload: ConsultaRequest,
    service: InpiRetrievalService = Depends(get_retrieval_service),
):
    """INPI 상표 검색 (classe básica)

    Flow:
        1. marca trim + 길이 검증 (세션 생성 전)
        2. RetrievalWorkflow 실행 (Home → Login → Pesquisa → Submit)
        3. HTML + 분류 결과 반환
    """
    request_id = new_request_id()

    try:
        marca = validate_search_term(payload.marca)
    except InvalidSearchTermException as e:
        logger.warning(f"[{request_id}] [API] Input validation failed: {e}")
        return error_response(400, INVALID_MARCA_MESSAGE)

    logger.info(f"[{request_id}] [API] Consulta marca: {marca}")

    try:
        outcome = await service.search(marca, request_id)
    except RetrievalError as e:
        logger.error(f"[{request_id}] [API ERROR] {e}")
        status_code = 504 if e.kind in _GATEWAY_TIMEOUT_KINDS else 502
        return error_response(
            status_code,
            e.cause or e.message,
            kind=e.kind.value,
            last_completed_step=e.last_completed_step.value,
        )
    except Exception as e:
        logger.exception(f"[{request_id}] [API ERROR] {type(e).__name__}: {e}")
        return error_response(500, str(e) or "Unknown error")

    if outcome.is_flagged:
        logger.warning(f"[{request_id}] [API] result page not recognized (html length {len(outcome.html)})")

    return ConsultaResponse(
        marca=marca,
        html=outcome.html,
        classification=outcome.classification.value,
        steps_completed=outcome.steps_completed,
        flagged=outcome.is_flagged,
        elapsed_ms=outcome.elapsed_ms,
    )
