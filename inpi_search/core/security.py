"""
내부 토큰 게이트 및 요청 식별자
"""

import hmac
import secrets
import time
from typing import Optional

from inpi_search.core.logging import logger


TOKEN_HEADER = "X-Internal-Token"


def is_valid_internal_token(provided: Optional[str], expected: str) -> bool:
    """공유 시크릿 헤더 비교 (상수 시간)

    Args:
        provided: 요청 헤더 값
        expected: 설정된 INTERNAL_API_TOKEN

    Returns:
        일치 여부
    """
    if not provided or not expected:
        return False
    ok = hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))
    if not ok:
        logger.warning(f"Rejected request with invalid {TOKEN_HEADER} (length={len(provided)})")
    return ok


def new_request_id() -> str:
    """로그 상관관계용 요청 ID (epoch ms + 랜덤 hex)"""
    return f"{int(time.time() * 1000)}-{secrets.token_hex(6)}"
