"""Structured step events

SessionDriver / RetryPolicy / RetrievalWorkflow는 콘솔에 직접 찍지 않고
주입된 EventSink로 이벤트를 내보냅니다. 기본 구현은 logger로 렌더링합니다.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

from inpi_search.core.logging import logger as default_logger, sanitize_for_log


@dataclass(frozen=True)
class WorkflowEvent:
    """단일 구조화 이벤트

    Attributes:
        name: 이벤트 이름 (예: "attempt_failed", "state_changed")
        level: logging 레벨
        data: 부가 필드
    """

    name: str
    level: int = logging.INFO
    data: dict[str, Any] = field(default_factory=dict)


class EventSink(Protocol):
    def emit(self, event: WorkflowEvent) -> None:
        ...


# 진단용 필드: 마스킹 없이 길이만 제한
_DIAGNOSTIC_FIELDS = frozenset({"snippet", "cause", "error", "url", "final_url"})
_MAX_FIELD_LENGTH = 1000


def render_field(key: str, value: Any) -> str:
    text = str(value)
    if key in _DIAGNOSTIC_FIELDS:
        return text if len(text) <= _MAX_FIELD_LENGTH else text[:_MAX_FIELD_LENGTH] + "..."
    return sanitize_for_log(text, max_length=_MAX_FIELD_LENGTH)


class LoggingEventSink:
    """요청 ID를 붙여 logger로 이벤트를 출력하는 EventSink"""

    def __init__(self, request_id: str = "-", logger: Optional[logging.Logger] = None):
        self.request_id = request_id
        self._logger = logger or default_logger

    def emit(self, event: WorkflowEvent) -> None:
        if not self._logger.isEnabledFor(event.level):
            return
        fields = " ".join(f"{key}={render_field(key, value)}" for key, value in event.data.items())
        self._logger.log(event.level, f"[{self.request_id}] [INPI] {event.name} {fields}".rstrip())
