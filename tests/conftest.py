"""전역 테스트 설정

역할:
- 테스트 환경 구성
- 공통 Fake (드라이버, 이벤트 싱크, sleep) 주입

금지:
- 실제 브라우저 실행 / INPI 네트워크 호출
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any

import pytest

# Settings()는 INTERNAL_API_TOKEN이 없으면 실패하므로 import 전에 설정
os.environ.setdefault("INTERNAL_API_TOKEN", "test-token")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "INFO")

# 프로젝트 루트를 경로에 추가
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from inpi_search.core.config import Settings  # noqa: E402
from inpi_search.engine import PacingPolicy, RetrievalWorkflow, StepSpec, build_default_steps  # noqa: E402
from tests.fixtures.fakes import FakeDriver, RecordingEventSink, RecordingSleep  # noqa: E402


@pytest.fixture
def settings() -> Settings:
    return Settings(
        internal_api_token="test-token",
        inpi_pacing_min_ms=1000,
        inpi_pacing_max_ms=1500,
        inpi_base_backoff_ms=800,
        inpi_jitter_max_ms=400,
        inpi_nav_max_attempts=4,
        inpi_submit_max_attempts=2,
    )


@pytest.fixture
def steps(settings: Settings) -> tuple[StepSpec, ...]:
    return build_default_steps(settings)


@pytest.fixture
def events() -> RecordingEventSink:
    return RecordingEventSink()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def make_workflow(steps, events, sleep):
    def _make(driver: FakeDriver, **kwargs: Any) -> RetrievalWorkflow:
        return RetrievalWorkflow(
            driver,
            kwargs.pop("steps", steps),
            kwargs.pop("pacing", PacingPolicy(1000, 1500, 400)),
            events=events,
            sleep=sleep,
            **kwargs,
        )

    return _make
