"""INPI 조회 서비스 - 요청별 워크플로우 조립 + 동시 브라우저 수 제한"""
import asyncio
from typing import Callable, Optional

from inpi_search.core.config import Settings
from inpi_search.core.logging import logger
from inpi_search.crawlers.driver import SessionDriver
from inpi_search.crawlers.playwright import PlaywrightSessionDriver
from inpi_search.engine import (
    EventSink,
    LoggingEventSink,
    PacingPolicy,
    RetrievalOutcome,
    RetrievalWorkflow,
    build_default_steps,
)


DriverFactory = Callable[[Settings, EventSink], SessionDriver]


def default_driver_factory(settings: Settings, events: EventSink) -> SessionDriver:
    return PlaywrightSessionDriver.from_settings(settings, events=events)


class InpiRetrievalService:
    """
    INPI 조회 서비스 - SRP: 워크플로우 조립과 동시성 제한만 담당

    - 요청마다 새 EventSink / SessionDriver / RetrievalWorkflow 생성 (세션 공유 없음)
    - 브라우저 동시 실행 수는 Semaphore로 제한
    """

    def __init__(
        self,
        settings: Settings,
        driver_factory: Optional[DriverFactory] = None,
    ):
        self.settings = settings
        self.driver_factory = driver_factory or default_driver_factory
        self.steps = build_default_steps(settings)
        self._slots = asyncio.Semaphore(settings.crawler_browser_concurrency)

    def build_workflow(self, request_id: str) -> RetrievalWorkflow:
        events = LoggingEventSink(request_id)
        return RetrievalWorkflow(
            self.driver_factory(self.settings, events),
            self.steps,
            PacingPolicy(
                min_ms=self.settings.inpi_pacing_min_ms,
                max_ms=self.settings.inpi_pacing_max_ms,
                jitter_max_ms=self.settings.inpi_jitter_max_ms,
            ),
            events=events,
            deadline_s=self.settings.inpi_run_deadline_s,
            teardown_timeout_s=self.settings.inpi_teardown_timeout_s,
            strict_validation=self.settings.inpi_strict_validation,
        )

    async def search(self, marca: str, request_id: str) -> RetrievalOutcome:
        """
        상표명 검색 결과 HTML 조회

        Args:
            marca: trim/길이 검증된 상표명
            request_id: 로그 상관관계 ID

        Returns:
            RetrievalOutcome

        Raises:
            RetrievalError: 워크플로우 실패
        """
        workflow = self.build_workflow(request_id)
        async with self._slots:
            logger.debug(f"[{request_id}] [API] browser slot acquired")
            return await workflow.run(marca)
