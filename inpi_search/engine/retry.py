"""단일 단계 재시도 정책 (bounded attempts + 증가하는 backoff)."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from .events import EventSink, LoggingEventSink, WorkflowEvent
from .pacing import PacingPolicy
from .result import AttemptOutcome, FailureKind


StepFn = Callable[[], Awaitable[AttemptOutcome]]
SleepFn = Callable[[float], Awaitable[None]]


class RetryPolicy:
    """실패한 단계 하나만 다시 시도합니다 (워크플로우 전체는 재시도하지 않음).

    - attempt N 실패 후 대기: base_backoff_ms * N + jitter
    - ELEMENT_NOT_FOUND 등 retryable=False 실패는 즉시 반환
    - 모두 실패하면 마지막 AttemptOutcome을 그대로 반환 (원인 예외 보존)

    Usage:
        retry = RetryPolicy(PacingPolicy())
        outcome = await retry.execute(lambda: driver.navigate(...), max_attempts=4, base_backoff_ms=800)
    """

    def __init__(
        self,
        pacing: PacingPolicy,
        events: Optional[EventSink] = None,
        sleep: Optional[SleepFn] = None,
    ):
        self.pacing = pacing
        self.events = events or LoggingEventSink()
        self._sleep = sleep or asyncio.sleep

    def backoff_for(self, attempt: int, base_backoff_ms: int) -> float:
        """attempt번째 실패 후 대기 시간 (초)"""
        return (base_backoff_ms * attempt) / 1000.0 + self.pacing.jitter()

    async def execute(
        self,
        step_fn: StepFn,
        max_attempts: int,
        base_backoff_ms: int,
        *,
        label: str = "step",
    ) -> AttemptOutcome:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1 (got {max_attempts})")
        if base_backoff_ms <= self.pacing.jitter_max_ms:
            raise ValueError(
                f"base_backoff_ms ({base_backoff_ms}) must exceed jitter window ({self.pacing.jitter_max_ms})"
            )

        attempt = 0
        while True:
            attempt += 1
            self.events.emit(WorkflowEvent("attempt", data={"step": label, "attempt": f"{attempt}/{max_attempts}"}))
            try:
                outcome = await step_fn()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                # 드라이버 경계 밖으로 새어 나온 예외도 transport 실패로 취급
                outcome = AttemptOutcome.failed(e, FailureKind.TRANSPORT)

            if outcome.ok:
                self.events.emit(
                    WorkflowEvent(
                        "attempt_ok",
                        data={"step": label, "attempt": attempt, "status": outcome.status, "final_url": outcome.final_url},
                    )
                )
                return outcome

            self.events.emit(
                WorkflowEvent(
                    "attempt_failed",
                    level=logging.WARNING,
                    data={"step": label, "attempt": attempt, "kind": outcome.kind.value if outcome.kind else None, "cause": outcome.cause},
                )
            )

            # 재시도 불가 또는 시도 소진: 마지막 결과를 그대로 반환
            if not outcome.retryable or attempt >= max_attempts:
                return outcome

            backoff = self.backoff_for(attempt, base_backoff_ms)
            self.events.emit(WorkflowEvent("backoff", data={"step": label, "ms": int(backoff * 1000)}))
            await self._sleep(backoff)
