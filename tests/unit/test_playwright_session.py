"""PlaywrightSessionDriver 단위 테스트 (Page 모의 객체 사용, 실제 브라우저 없음)."""

from __future__ import annotations

import asyncio
import logging
from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError

from inpi_search.core.exceptions import BrowserException, ElementNotFoundException, NavigationStatusException
from inpi_search.crawlers.playwright import BrowserSession, PlaywrightSessionDriver, build_launch_args
from inpi_search.crawlers.playwright import session as session_module
from inpi_search.engine import FailureKind


INPUT = 'input[name="marca"]'
SUBMIT = 'input[name="botao"]'
HOME = "https://busca.inpi.gov.br/pePI/"
RESULT_URL = "https://busca.inpi.gov.br/pePI/servlet/MarcasServletController"


class FakeNavigation:
    """page.expect_navigation() 컨텍스트 매니저 대역"""

    def __init__(self, response):
        self._response = response

    async def __aenter__(self):
        future = asyncio.get_running_loop().create_future()
        future.set_result(self._response)
        self.value = future
        return self

    async def __aexit__(self, *exc_info):
        return False


def make_page(url: str = HOME) -> MagicMock:
    page = MagicMock()
    page.url = url
    page.goto = AsyncMock()
    page.content = AsyncMock(return_value="<html></html>")
    page.close = AsyncMock()
    page.keyboard.type = AsyncMock()
    return page


def make_form(page: MagicMock, *, input_wait_error=None, submit_count: int = 1):
    field = MagicMock()
    field.wait_for = AsyncMock(side_effect=input_wait_error)
    field.fill = AsyncMock()
    submit = MagicMock()
    submit.count = AsyncMock(return_value=submit_count)
    submit.click = AsyncMock()
    locators = {INPUT: MagicMock(first=field), SUBMIT: MagicMock(first=submit)}
    page.locator = MagicMock(side_effect=lambda selector: locators[selector])
    return field, submit


def make_session(page: MagicMock) -> BrowserSession:
    return BrowserSession(
        playwright=MagicMock(stop=AsyncMock()),
        browser=MagicMock(close=AsyncMock()),
        context=MagicMock(close=AsyncMock()),
        page=page,
    )


@pytest.fixture
def driver(events) -> PlaywrightSessionDriver:
    return PlaywrightSessionDriver(user_agent="test-agent", typing_delay_ms=(0, 0), events=events)


def test_launch_args_are_container_safe():
    args = build_launch_args()
    assert "--disable-dev-shm-usage" in args
    assert len(args) == len(set(args))


class TestNavigate:
    @pytest.mark.asyncio
    async def test_success(self, driver):
        page = make_page()
        page.goto.return_value = MagicMock(status=200)

        outcome = await driver.navigate(make_session(page), HOME, "domcontentloaded", 45000)

        assert outcome.ok
        assert outcome.status == 200
        assert outcome.final_url == HOME
        page.goto.assert_awaited_once_with(HOME, wait_until="domcontentloaded", timeout=45000)

    @pytest.mark.asyncio
    async def test_timeout_is_tagged(self, driver):
        page = make_page()
        page.goto.side_effect = PlaywrightTimeoutError("Timeout 45000ms exceeded.")

        outcome = await driver.navigate(make_session(page), HOME, "domcontentloaded", 45000)

        assert not outcome.ok
        assert outcome.kind == FailureKind.TIMEOUT
        assert outcome.retryable

    @pytest.mark.asyncio
    async def test_transport_error(self, driver):
        page = make_page()
        page.goto.side_effect = PlaywrightError("net::ERR_CONNECTION_RESET")

        outcome = await driver.navigate(make_session(page), HOME, "domcontentloaded", 45000)

        assert outcome.kind == FailureKind.TRANSPORT
        assert "ERR_CONNECTION_RESET" in outcome.cause

    @pytest.mark.asyncio
    async def test_error_status_is_transport_failure(self, driver):
        page = make_page()
        page.goto.return_value = MagicMock(status=503)

        outcome = await driver.navigate(make_session(page), HOME, "domcontentloaded", 45000)

        assert outcome.kind == FailureKind.TRANSPORT
        assert isinstance(outcome.error, NavigationStatusException)


class TestFillAndSubmit:
    @pytest.mark.asyncio
    async def test_clears_types_and_submits(self, driver):
        page = make_page(RESULT_URL)
        field, submit = make_form(page)
        page.expect_navigation = MagicMock(return_value=FakeNavigation(MagicMock(status=200)))

        outcome = await driver.fill_and_submit(make_session(page), INPUT, "solano", SUBMIT, 45000, 25000)

        assert outcome.ok
        assert outcome.final_url == RESULT_URL
        field.fill.assert_awaited_once_with("", timeout=45000)
        typed = "".join(call.args[0] for call in page.keyboard.type.await_args_list)
        assert typed == "solano"
        assert page.keyboard.type.await_count == len("solano")
        submit.click.assert_awaited_once()
        page.expect_navigation.assert_called_once_with(wait_until="domcontentloaded", timeout=45000)

    @pytest.mark.asyncio
    async def test_missing_input_is_not_retryable(self, driver):
        page = make_page()
        make_form(page, input_wait_error=PlaywrightTimeoutError("Timeout 25000ms exceeded."))

        outcome = await driver.fill_and_submit(make_session(page), INPUT, "solano", SUBMIT, 45000, 25000)

        assert outcome.kind == FailureKind.ELEMENT_NOT_FOUND
        assert not outcome.retryable
        assert isinstance(outcome.error, ElementNotFoundException)
        page.keyboard.type.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_submit_control(self, driver):
        page = make_page()
        field, _ = make_form(page, submit_count=0)

        outcome = await driver.fill_and_submit(make_session(page), INPUT, "solano", SUBMIT, 45000, 25000)

        assert outcome.kind == FailureKind.ELEMENT_NOT_FOUND
        assert SUBMIT in str(outcome.error)
        field.fill.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_navigation_never_happens(self, driver):
        page = make_page()
        _, submit = make_form(page)
        submit.click.side_effect = PlaywrightTimeoutError("Timeout 45000ms exceeded.")
        page.expect_navigation = MagicMock(return_value=FakeNavigation(None))

        outcome = await driver.fill_and_submit(make_session(page), INPUT, "solano", SUBMIT, 45000, 25000)

        assert outcome.kind == FailureKind.TIMEOUT
        assert outcome.retryable


class TestClose:
    @pytest.mark.asyncio
    async def test_close_is_idempotent_and_swallows_errors(self, driver, events):
        page = make_page()
        session = make_session(page)
        session.browser.close.side_effect = PlaywrightError("Browser has been closed")

        await driver.close(session)
        await driver.close(session)

        page.close.assert_awaited_once()
        session.context.close.assert_awaited_once()
        session.browser.close.assert_awaited_once()
        session.playwright.stop.assert_awaited_once()
        failures = events.named("close_failed")
        assert [e.data["target"] for e in failures] == ["browser"]

    @pytest.mark.asyncio
    async def test_read_content(self, driver):
        page = make_page()
        page.content.return_value = "<html>RESULTADO DA PESQUISA</html>"
        assert await driver.read_content(make_session(page)) == "<html>RESULTADO DA PESQUISA</html>"


class FakePlaywrightStack:
    """async_playwright() → chromium.launch → new_context → new_page 체인 대역"""

    def __init__(self):
        self.cdp = MagicMock(send=AsyncMock())
        self.page = make_page()
        self.page.set_default_navigation_timeout = MagicMock()
        self.page.set_default_timeout = MagicMock()
        self.page.on = MagicMock()
        self.context = MagicMock(
            new_page=AsyncMock(return_value=self.page),
            new_cdp_session=AsyncMock(return_value=self.cdp),
            close=AsyncMock(),
        )
        self.browser = MagicMock(new_context=AsyncMock(return_value=self.context), close=AsyncMock())
        self.pw = MagicMock(stop=AsyncMock())
        self.pw.chromium.launch = AsyncMock(return_value=self.browser)

    def install(self, monkeypatch):
        starter = MagicMock(start=AsyncMock(return_value=self.pw))
        monkeypatch.setattr(session_module, "async_playwright", MagicMock(return_value=starter))
        return self


@pytest.fixture
def stack(monkeypatch) -> FakePlaywrightStack:
    return FakePlaywrightStack().install(monkeypatch)


class TestOpen:
    @pytest.mark.asyncio
    async def test_open_builds_isolated_session(self, stack, events):
        driver = PlaywrightSessionDriver(user_agent="test-agent", navigation_timeout_ms=30000, locale="pt-BR", events=events)

        session = await driver.open()

        assert session.page is stack.page
        assert session.browser is stack.browser
        launch_kwargs = stack.pw.chromium.launch.await_args.kwargs
        assert launch_kwargs["headless"] is True
        assert launch_kwargs["args"] == build_launch_args()
        context_kwargs = stack.browser.new_context.await_args.kwargs
        assert context_kwargs["user_agent"] == "test-agent"
        assert context_kwargs["locale"] == "pt-BR"
        assert context_kwargs["viewport"] == {"width": 1280, "height": 800}
        stack.page.set_default_navigation_timeout.assert_called_once_with(30000)
        stack.cdp.send.assert_awaited_once_with("Network.setCacheDisabled", {"cacheDisabled": True})
        registered = {call.args[0] for call in stack.page.on.call_args_list}
        assert registered == {"requestfailed", "response", "pageerror"}
        assert events.named("browser_ready")

    @pytest.mark.asyncio
    async def test_cache_disable_failure_is_a_warning(self, stack, events):
        stack.context.new_cdp_session.side_effect = PlaywrightError("CDP not supported")
        driver = PlaywrightSessionDriver(user_agent="test-agent", events=events)

        session = await driver.open()

        assert session.page is stack.page
        failures = events.named("cache_disable_failed")
        assert failures and failures[0].level == logging.WARNING
        assert "CDP not supported" in failures[0].data["error"]

    @pytest.mark.asyncio
    async def test_partial_launch_is_cleaned_up(self, stack, events):
        cause = PlaywrightError("Target page, context or browser has been closed")
        stack.browser.new_context.side_effect = cause
        driver = PlaywrightSessionDriver(user_agent="test-agent", events=events)

        with pytest.raises(BrowserException) as exc_info:
            await driver.open()

        assert exc_info.value.__cause__ is cause
        stack.browser.close.assert_awaited_once()
        stack.pw.stop.assert_awaited_once()
        stack.context.close.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cancel_during_open_cleans_up_and_reraises(self, stack, events):
        stack.context.new_page.side_effect = asyncio.CancelledError()
        driver = PlaywrightSessionDriver(user_agent="test-agent", events=events)

        with pytest.raises(asyncio.CancelledError):
            await driver.open()

        stack.context.close.assert_awaited_once()
        stack.browser.close.assert_awaited_once()
        stack.pw.stop.assert_awaited_once()
