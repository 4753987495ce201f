"""INPI pePI 고정 4단계 내비게이션 정의."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from inpi_search.core.config import Settings

from .result import WorkflowState


HOME_PATH = "/"
LOGIN_PATH = "/servlet/LoginController?action=login"
SEARCH_FORM_PATH = "/jsp/marcas/Pesquisa_classe_basica.jsp"

SEARCH_INPUT_SELECTOR = 'input[name="marca"]'
SUBMIT_SELECTOR = 'input[name="botao"]'

READY_SIGNAL = "domcontentloaded"


@dataclass(frozen=True)
class StepSpec:
    """단일 내비게이션 단계

    url이 있으면 page.goto, 없으면 input_selector에 입력 후 submit_selector 클릭.
    """

    name: str
    target_state: WorkflowState
    timeout_ms: int
    max_attempts: int
    base_backoff_ms: int
    url: Optional[str] = None
    ready_signal: str = READY_SIGNAL
    input_selector: Optional[str] = None
    submit_selector: Optional[str] = None
    element_timeout_ms: Optional[int] = None

    @property
    def is_submit(self) -> bool:
        return self.url is None


def build_default_steps(settings: Settings) -> tuple[StepSpec, ...]:
    """Home → AnonymousLogin → SearchForm → SubmitSearch"""
    base = settings.inpi_base_url.rstrip("/")
    nav = dict(
        timeout_ms=settings.inpi_nav_timeout_ms,
        max_attempts=settings.inpi_nav_max_attempts,
        base_backoff_ms=settings.inpi_base_backoff_ms,
    )
    return (
        StepSpec(name="home", target_state=WorkflowState.HOME_LOADED, url=f"{base}{HOME_PATH}", **nav),
        StepSpec(name="anonymous_login", target_state=WorkflowState.LOGGED_IN, url=f"{base}{LOGIN_PATH}", **nav),
        StepSpec(name="search_form", target_state=WorkflowState.SEARCH_PAGE_READY, url=f"{base}{SEARCH_FORM_PATH}", **nav),
        StepSpec(
            name="submit_search",
            target_state=WorkflowState.SUBMITTED,
            timeout_ms=settings.inpi_nav_timeout_ms,
            max_attempts=settings.inpi_submit_max_attempts,
            base_backoff_ms=settings.inpi_base_backoff_ms,
            input_selector=SEARCH_INPUT_SELECTOR,
            submit_selector=SUBMIT_SELECTOR,
            element_timeout_ms=settings.inpi_element_timeout_ms,
        ),
    )
