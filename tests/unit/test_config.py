"""Settings 검증 및 기본 단계 구성 테스트."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from inpi_search.core.config import Settings
from inpi_search.engine import WorkflowState, build_default_steps
from inpi_search.engine.steps import SEARCH_INPUT_SELECTOR, SUBMIT_SELECTOR


def test_missing_token_is_rejected():
    with pytest.raises(ValidationError):
        Settings(internal_api_token="")


def test_defaults():
    s = Settings(internal_api_token="t")
    assert s.port == 10000
    assert s.inpi_pacing_min_ms == 1000 and s.inpi_pacing_max_ms == 1500
    assert s.max_request_bytes == 200 * 1024
    assert s.inpi_strict_validation is False
    assert s.cors_origins == ["https://mqnvfjteuwqbomvbmyhd.supabase.co"]


def test_cors_origins_merges_allowlist():
    s = Settings(internal_api_token="t", allowed_origins=["https://app.example.com"], supabase_project_url="")
    assert s.cors_origins == ["https://app.example.com"]


@pytest.mark.parametrize(
    "overrides",
    [
        {"inpi_pacing_min_ms": 2000, "inpi_pacing_max_ms": 1000},
        {"inpi_typing_delay_min_ms": 50, "inpi_typing_delay_max_ms": 5},
        {"inpi_jitter_max_ms": 800, "inpi_base_backoff_ms": 800},
        {"inpi_nav_timeout_ms": 0},
        {"inpi_submit_max_attempts": 0},
        {"inpi_run_deadline_s": 0},
        {"crawler_browser_concurrency": 0},
    ],
)
def test_invalid_values(overrides):
    with pytest.raises(ValidationError):
        Settings(internal_api_token="t", **overrides)


def test_default_steps_order_and_selectors(settings):
    steps = build_default_steps(settings)

    assert [s.target_state for s in steps] == [
        WorkflowState.HOME_LOADED,
        WorkflowState.LOGGED_IN,
        WorkflowState.SEARCH_PAGE_READY,
        WorkflowState.SUBMITTED,
    ]
    assert steps[0].url == "https://busca.inpi.gov.br/pePI/"
    assert steps[1].url == "https://busca.inpi.gov.br/pePI/servlet/LoginController?action=login"
    assert steps[2].url == "https://busca.inpi.gov.br/pePI/jsp/marcas/Pesquisa_classe_basica.jsp"
    assert all(s.ready_signal == "domcontentloaded" for s in steps)

    submit = steps[3]
    assert submit.is_submit
    assert submit.input_selector == SEARCH_INPUT_SELECTOR == 'input[name="marca"]'
    assert submit.submit_selector == SUBMIT_SELECTOR == 'input[name="botao"]'
    assert submit.max_attempts == settings.inpi_submit_max_attempts
    assert all(s.max_attempts == settings.inpi_nav_max_attempts for s in steps[:3])
