"""Retrieval Result - Standardized outcome types

단일 시도(AttemptOutcome)와 전체 워크플로우 결과(RetrievalOutcome)의 표준 형식입니다.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class WorkflowState(str, Enum):
    """워크플로우 상태 (Init → ... → Done, 어디서든 Failed 가능)"""

    INIT = "init"
    HOME_LOADED = "home_loaded"
    LOGGED_IN = "logged_in"
    SEARCH_PAGE_READY = "search_page_ready"
    SUBMITTED = "submitted"
    DONE = "done"
    FAILED = "failed"


class FailureKind(str, Enum):
    """실패 분류"""

    TRANSPORT = "transport"  # 네트워크 오류, 4xx/5xx, DOM-ready 미발생
    TIMEOUT = "timeout"  # 시도별 wall-clock 초과
    ELEMENT_NOT_FOUND = "element_not_found"  # 페이지는 떴지만 폼 요소 없음 (재시도 안 함)
    CANCELLED = "cancelled"  # 호출자 deadline/abort
    UNRECOGNIZED_CONTENT = "unrecognized_content"  # strict 모드에서만 사용


class Classification(str, Enum):
    """결과 페이지 분류"""

    VALID_RESULTS = "valid_results"
    VALID_EMPTY = "valid_empty"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class AttemptOutcome:
    """StepSpec 1회 실행 결과

    실패한 시도는 DOM 상태가 불확정이므로 부분 복구 없이 같은 내비게이션을 다시 수행합니다.

    Attributes:
        ok: 성공 여부
        final_url: 성공 시 최종 URL
        status: HTTP 상태 코드 (응답이 있을 때)
        error: 실패 원인 (원래 예외 객체를 그대로 보존)
        kind: 실패 분류
        retryable: 재시도 가능 여부
    """

    ok: bool
    final_url: Optional[str] = None
    status: Optional[int] = None
    error: Optional[BaseException] = None
    kind: Optional[FailureKind] = None
    retryable: bool = True

    @classmethod
    def succeeded(cls, final_url: str, status: Optional[int] = None) -> "AttemptOutcome":
        return cls(ok=True, final_url=final_url, status=status)

    @classmethod
    def failed(
        cls,
        error: BaseException,
        kind: FailureKind = FailureKind.TRANSPORT,
        retryable: Optional[bool] = None,
    ) -> "AttemptOutcome":
        if retryable is None:
            retryable = kind in (FailureKind.TRANSPORT, FailureKind.TIMEOUT)
        return cls(ok=False, error=error, kind=kind, retryable=retryable)

    @property
    def cause(self) -> str:
        if self.error is None:
            return ""
        text = str(self.error).strip()
        return f"{type(self.error).__name__}: {text}" if text else type(self.error).__name__


@dataclass(frozen=True)
class RetrievalOutcome:
    """워크플로우 최종 결과 (불변)

    Attributes:
        html: 결과 페이지 원본 HTML
        classification: 결과 페이지 분류
        steps_completed: 완료된 단계 수
        term: 실제로 입력한 검색어 (trim 후)
        final_url: 마지막 페이지 URL
        elapsed_ms: 소요 시간 (밀리초)
    """

    html: str
    classification: Classification
    steps_completed: int
    term: str = ""
    final_url: Optional[str] = None
    elapsed_ms: float = 0.0

    @property
    def is_flagged(self) -> bool:
        """결과 페이지가 예상한 형태가 아님 (경고)"""
        return self.classification == Classification.UNRECOGNIZED
