"""INPI Playwright 세션 드라이버.

요청마다 브라우저 1개 + 컨텍스트 1개 + 페이지 1개를 띄우고 끝나면 모두 닫습니다.
쿠키/DOM 상태가 요청 간에 섞이지 않도록 공유 브라우저는 쓰지 않습니다.
"""

from __future__ import annotations

import asyncio
import logging
import platform
import random
from dataclasses import dataclass
from typing import Any, Optional

from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from inpi_search.core.config import Settings
from inpi_search.core.exceptions import BrowserException, ElementNotFoundException, NavigationStatusException
from inpi_search.engine.events import EventSink, LoggingEventSink, WorkflowEvent
from inpi_search.engine.result import AttemptOutcome, FailureKind


DEFAULT_VIEWPORT = {"width": 1280, "height": 800}
TARGET_HOST = "busca.inpi.gov.br"


def build_launch_args() -> list[str]:
    args: list[str] = [
        "--disable-dev-shm-usage",
        "--disable-gpu",
        "--disable-background-networking",
        "--disable-default-apps",
        "--disable-extensions",
        "--no-first-run",
        "--no-default-browser-check",
    ]

    if platform.system().lower() == "linux":
        args.extend(["--no-sandbox", "--disable-setuid-sandbox", "--no-zygote"])

    return args


@dataclass
class BrowserSession:
    """요청 1건이 독점하는 브라우저 세션 핸들"""

    playwright: Playwright
    browser: Browser
    context: BrowserContext
    page: Page
    closed: bool = False


class PlaywrightSessionDriver:
    """SessionDriver의 Playwright 구현

    - navigate/fill_and_submit은 예외 대신 AttemptOutcome을 반환
    - close는 멱등이며 예외를 밖으로 던지지 않음
    - 재시도는 하지 않음 (RetryPolicy 담당)
    """

    def __init__(
        self,
        *,
        user_agent: str,
        navigation_timeout_ms: int = 45000,
        headless: bool = True,
        locale: str = "pt-BR",
        typing_delay_ms: tuple[int, int] = (5, 45),
        events: Optional[EventSink] = None,
        rng: Optional[random.Random] = None,
        target_host: str = TARGET_HOST,
    ):
        self.user_agent = user_agent
        self.navigation_timeout_ms = navigation_timeout_ms
        self.headless = headless
        self.locale = locale
        self.typing_delay_ms = typing_delay_ms
        self.events = events or LoggingEventSink()
        self.target_host = target_host
        self._rng = rng or random.Random()

    @classmethod
    def from_settings(cls, settings: Settings, events: Optional[EventSink] = None) -> "PlaywrightSessionDriver":
        return cls(
            user_agent=settings.crawler_user_agent,
            navigation_timeout_ms=settings.crawler_timeout,
            headless=settings.crawler_headless,
            locale=settings.crawler_locale,
            typing_delay_ms=(settings.inpi_typing_delay_min_ms, settings.inpi_typing_delay_max_ms),
            events=events,
        )

    async def open(self) -> BrowserSession:
        pw: Optional[Playwright] = None
        browser: Optional[Browser] = None
        context: Optional[BrowserContext] = None
        try:
            pw = await async_playwright().start()
            browser = await pw.chromium.launch(
                headless=self.headless,
                args=build_launch_args(),
                timeout=self.navigation_timeout_ms,
            )
            context = await browser.new_context(
                user_agent=self.user_agent,
                viewport=DEFAULT_VIEWPORT,
                locale=self.locale,
            )
            page = await context.new_page()
            page.set_default_navigation_timeout(self.navigation_timeout_ms)
            page.set_default_timeout(self.navigation_timeout_ms)
            await self._disable_cache(context, page)
            self._attach_listeners(page)
        except BaseException as e:
            await self._close_partial(pw, browser, context)
            if isinstance(e, PlaywrightError):
                raise BrowserException(f"Browser launch failed: {e}") from e
            raise

        self.events.emit(WorkflowEvent("browser_ready", data={"headless": self.headless}))
        return BrowserSession(playwright=pw, browser=browser, context=context, page=page)

    async def navigate(self, session: BrowserSession, url: str, ready_signal: str, timeout_ms: int) -> AttemptOutcome:
        try:
            response = await session.page.goto(url, wait_until=ready_signal, timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            return AttemptOutcome.failed(e, FailureKind.TIMEOUT)
        except PlaywrightError as e:
            return AttemptOutcome.failed(e, FailureKind.TRANSPORT)

        status = response.status if response is not None else None
        if status is not None and status >= 400:
            return AttemptOutcome.failed(NavigationStatusException(url, status), FailureKind.TRANSPORT)
        return AttemptOutcome.succeeded(session.page.url, status)

    async def fill_and_submit(
        self,
        session: BrowserSession,
        input_selector: str,
        text: str,
        submit_selector: str,
        timeout_ms: int,
        element_timeout_ms: int,
    ) -> AttemptOutcome:
        page = session.page
        field = page.locator(input_selector).first
        submit = page.locator(submit_selector).first

        try:
            await field.wait_for(state="visible", timeout=element_timeout_ms)
        except PlaywrightTimeoutError:
            return AttemptOutcome.failed(ElementNotFoundException(input_selector), FailureKind.ELEMENT_NOT_FOUND)
        except PlaywrightError as e:
            return AttemptOutcome.failed(e, FailureKind.TRANSPORT)

        try:
            if await submit.count() == 0:
                return AttemptOutcome.failed(ElementNotFoundException(submit_selector), FailureKind.ELEMENT_NOT_FOUND)

            # 이전 실패 시도에서 남은 텍스트 제거 후 한 글자씩 입력
            await field.fill("", timeout=timeout_ms)
            for ch in text:
                await page.keyboard.type(ch)
                await asyncio.sleep(self._typing_delay())

            async with page.expect_navigation(wait_until="domcontentloaded", timeout=timeout_ms) as nav_info:
                await submit.click(timeout=timeout_ms)
            response = await nav_info.value
        except PlaywrightTimeoutError as e:
            return AttemptOutcome.failed(e, FailureKind.TIMEOUT)
        except PlaywrightError as e:
            return AttemptOutcome.failed(e, FailureKind.TRANSPORT)

        status = response.status if response is not None else None
        if status is not None and status >= 400:
            return AttemptOutcome.failed(NavigationStatusException(page.url, status), FailureKind.TRANSPORT)
        return AttemptOutcome.succeeded(page.url, status)

    async def read_content(self, session: BrowserSession) -> str:
        return await session.page.content()

    async def close(self, session: BrowserSession) -> None:
        if session is None or session.closed:
            return
        session.closed = True
        await self._close_partial(session.playwright, session.browser, session.context, session.page)

    def _typing_delay(self) -> float:
        low, high = self.typing_delay_ms
        return self._rng.randint(low, high) / 1000.0

    async def _disable_cache(self, context: BrowserContext, page: Page) -> None:
        try:
            cdp = await context.new_cdp_session(page)
            await cdp.send("Network.setCacheDisabled", {"cacheDisabled": True})
        except PlaywrightError as e:
            self.events.emit(WorkflowEvent("cache_disable_failed", level=logging.WARNING, data={"error": str(e)}))

    def _attach_listeners(self, page: Page) -> None:
        def on_request_failed(request: Any) -> None:
            self.events.emit(
                WorkflowEvent("request_failed", level=logging.WARNING, data={"url": request.url, "error": request.failure})
            )

        def on_response(response: Any) -> None:
            if self.target_host in response.url:
                self.events.emit(
                    WorkflowEvent("response", level=logging.DEBUG, data={"status": response.status, "url": response.url})
                )

        def on_page_error(error: Any) -> None:
            self.events.emit(WorkflowEvent("page_error", level=logging.ERROR, data={"error": str(error)}))

        page.on("requestfailed", on_request_failed)
        page.on("response", on_response)
        page.on("pageerror", on_page_error)

    async def _close_partial(
        self,
        pw: Optional[Playwright],
        browser: Optional[Browser],
        context: Optional[BrowserContext],
        page: Optional[Page] = None,
    ) -> None:
        closers = (
            ("page", page.close if page is not None else None),
            ("context", context.close if context is not None else None),
            ("browser", browser.close if browser is not None else None),
            ("playwright", pw.stop if pw is not None else None),
        )
        for label, closer in closers:
            if closer is None:
                continue
            try:
                await closer()
            except Exception as e:
                self.events.emit(
                    WorkflowEvent(
                        "close_failed",
                        level=logging.WARNING,
                        data={"target": label, "error": f"{type(e).__name__}: {e}"},
                    )
                )
