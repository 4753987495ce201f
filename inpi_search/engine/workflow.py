"""Retrieval Workflow - INPI 4단계 세션 상태 머신

Init → HomeLoaded → LoggedIn → SearchPageReady → Submitted → Done
(어느 비종료 상태에서든 Failed로 전이)

각 전이 = StepSpec 1개를 RetryPolicy로 실행 + PacingPolicy 대기 1회 (마지막 전이 제외).
세션 정리는 모든 종료 경로에서 정확히 한 번 수행합니다.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional, Sequence

from inpi_search.core.exceptions import (
    BrowserException,
    ConfigurationException,
    InvalidSearchTermException,
    RetrievalError,
)

from .events import EventSink, LoggingEventSink, WorkflowEvent
from .pacing import PacingPolicy
from .result import AttemptOutcome, Classification, FailureKind, RetrievalOutcome, WorkflowState
from .retry import RetryPolicy
from .steps import StepSpec
from .validator import ResultValidator

if TYPE_CHECKING:
    from inpi_search.crawlers.driver import SessionDriver


MIN_TERM_LENGTH = 2
HTML_SNIPPET_LENGTH = 900


def validate_search_term(term: Any) -> str:
    """검색어 전제 조건 확인 후 trim된 값 반환

    Raises:
        InvalidSearchTermException: trim 후 2자 미만
    """
    value = str(term or "").strip()
    if len(value) < MIN_TERM_LENGTH:
        raise InvalidSearchTermException(f"must have at least {MIN_TERM_LENGTH} characters after trimming")
    return value


@dataclass
class _RunContext:
    """워크플로우 1회 실행 동안만 존재하는 상태"""

    state: WorkflowState = WorkflowState.INIT
    last_completed: WorkflowState = WorkflowState.INIT
    session: Optional[Any] = None
    steps_completed: int = 0


class RetrievalWorkflow:
    """SessionDriver + RetryPolicy + PacingPolicy + ResultValidator 조합

    Usage:
        workflow = RetrievalWorkflow(driver, build_default_steps(settings), PacingPolicy())
        outcome = await workflow.run("solano", deadline_s=120)
    """

    def __init__(
        self,
        driver: SessionDriver,
        steps: Sequence[StepSpec],
        pacing: PacingPolicy,
        *,
        retry: Optional[RetryPolicy] = None,
        validator: Optional[ResultValidator] = None,
        events: Optional[EventSink] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
        deadline_s: Optional[float] = None,
        teardown_timeout_s: float = 10.0,
        strict_validation: bool = False,
    ):
        if not steps:
            raise ConfigurationException("workflow requires at least one step")
        if any(step.is_submit for step in steps[:-1]):
            raise ConfigurationException("only the final step may submit the search form")
        self.driver = driver
        self.steps = tuple(steps)
        self.pacing = pacing
        self.events = events or LoggingEventSink()
        self._sleep = sleep or asyncio.sleep
        self.retry = retry or RetryPolicy(pacing, events=self.events, sleep=self._sleep)
        self.validator = validator or ResultValidator()
        self.deadline_s = deadline_s
        self.teardown_timeout_s = teardown_timeout_s
        self.strict_validation = strict_validation

    async def run(self, term: str, *, deadline_s: Optional[float] = None) -> RetrievalOutcome:
        """검색어 하나에 대해 전체 워크플로우 실행

        Raises:
            InvalidSearchTermException: 세션을 열기 전에 검색어 거부
            RetrievalError: 재시도 소진 / deadline 초과 / strict 모드의 인식 불가 페이지
            asyncio.CancelledError: 호출자 취소 (정리 후 재전파)
        """
        term = validate_search_term(term)
        deadline = deadline_s if deadline_s is not None else self.deadline_s
        ctx = _RunContext()
        loop = asyncio.get_running_loop()
        started = loop.time()

        try:
            if deadline is None:
                return await self._drive(ctx, term, started)
            return await asyncio.wait_for(self._drive(ctx, term, started), timeout=deadline)
        except asyncio.TimeoutError:
            self._transition(ctx, WorkflowState.FAILED)
            self.events.emit(
                WorkflowEvent("deadline_exceeded", level=logging.ERROR, data={"deadline_s": deadline, "last": ctx.last_completed.value})
            )
            raise RetrievalError(
                FailureKind.CANCELLED, f"deadline of {deadline}s exceeded", ctx.last_completed
            ) from None
        except asyncio.CancelledError:
            self._transition(ctx, WorkflowState.FAILED)
            self.events.emit(WorkflowEvent("cancelled", level=logging.WARNING, data={"last": ctx.last_completed.value}))
            raise
        finally:
            await self._teardown(ctx)

    async def _drive(self, ctx: _RunContext, term: str, started: float) -> RetrievalOutcome:
        self.events.emit(WorkflowEvent("launching_browser"))
        try:
            ctx.session = await self.driver.open()
        except BrowserException as e:
            self._transition(ctx, WorkflowState.FAILED)
            raise RetrievalError(FailureKind.TRANSPORT, str(e), ctx.last_completed) from e

        last_index = len(self.steps) - 1
        outcome: Optional[AttemptOutcome] = None
        for index, step in enumerate(self.steps):
            self.events.emit(WorkflowEvent("step", data={"n": index + 1, "name": step.name}))
            outcome = await self.retry.execute(
                lambda step=step: self._attempt(ctx.session, step, term),
                step.max_attempts,
                step.base_backoff_ms,
                label=step.name,
            )
            if not outcome.ok:
                self._transition(ctx, WorkflowState.FAILED)
                kind = outcome.kind or FailureKind.TRANSPORT
                raise RetrievalError(kind, outcome.cause, ctx.last_completed) from outcome.error

            ctx.steps_completed += 1
            self._transition(ctx, step.target_state)

            if index < last_index:
                pause = self.pacing.delay()
                self.events.emit(WorkflowEvent("pacing", level=logging.DEBUG, data={"after": step.name, "ms": int(pause * 1000)}))
                await self._sleep(pause)

        try:
            html = await self.driver.read_content(ctx.session)
        except Exception as e:
            self._transition(ctx, WorkflowState.FAILED)
            raise RetrievalError(FailureKind.TRANSPORT, f"{type(e).__name__}: {e}", ctx.last_completed) from e

        classification = self.validator.classify(html)
        self.events.emit(WorkflowEvent("classified", data={"html_length": len(html), "classification": classification.value}))

        if classification == Classification.UNRECOGNIZED:
            self.events.emit(
                WorkflowEvent("unrecognized_page", level=logging.WARNING, data={"snippet": html[:HTML_SNIPPET_LENGTH]})
            )
            if self.strict_validation:
                self._transition(ctx, WorkflowState.FAILED)
                raise RetrievalError(
                    FailureKind.UNRECOGNIZED_CONTENT, "result page does not look like an INPI result", ctx.last_completed
                )

        self._transition(ctx, WorkflowState.DONE)
        elapsed_ms = (asyncio.get_running_loop().time() - started) * 1000
        return RetrievalOutcome(
            html=html,
            classification=classification,
            steps_completed=ctx.steps_completed,
            term=term,
            final_url=outcome.final_url if outcome is not None else None,
            elapsed_ms=round(elapsed_ms, 1),
        )

    async def _attempt(self, session: Any, step: StepSpec, term: str) -> AttemptOutcome:
        if step.is_submit:
            return await self.driver.fill_and_submit(
                session,
                step.input_selector,
                term,
                step.submit_selector,
                step.timeout_ms,
                step.element_timeout_ms or step.timeout_ms,
            )
        return await self.driver.navigate(session, step.url, step.ready_signal, step.timeout_ms)

    def _transition(self, ctx: _RunContext, new_state: WorkflowState) -> None:
        if ctx.state in (WorkflowState.DONE, WorkflowState.FAILED):
            return
        previous = ctx.state
        ctx.state = new_state
        if new_state != WorkflowState.FAILED:
            ctx.last_completed = new_state
        self.events.emit(WorkflowEvent("state_changed", data={"from": previous.value, "to": new_state.value}))

    async def _teardown(self, ctx: _RunContext) -> None:
        """세션 정리 (취소 불가, 제한 시간 내 best-effort)"""
        session, ctx.session = ctx.session, None
        if session is None:
            return
        self.events.emit(WorkflowEvent("closing_browser"))
        try:
            await asyncio.wait_for(asyncio.shield(self.driver.close(session)), timeout=self.teardown_timeout_s)
        except asyncio.CancelledError:
            # shield 덕분에 close 자체는 계속 진행됨
            self.events.emit(WorkflowEvent("teardown_interrupted", level=logging.WARNING))
            raise
        except Exception as e:
            self.events.emit(
                WorkflowEvent("teardown_failed", level=logging.WARNING, data={"error": f"{type(e).__name__}: {e}"})
            )
