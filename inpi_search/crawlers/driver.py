"""SessionDriver Protocol - Interface for browser session drivers

워크플로우가 사용하는 브라우저 세션 드라이버 인터페이스입니다.
드라이버는 재시도하지 않습니다 (RetryPolicy가 드라이버 호출을 감쌉니다).
"""

from typing import Any, Protocol

from inpi_search.engine.result import AttemptOutcome


class SessionDriver(Protocol):
    """브라우저 세션 드라이버 프로토콜

    구현 예시:
        class PlaywrightSessionDriver(SessionDriver):
            async def navigate(self, session, url, ready_signal, timeout_ms) -> AttemptOutcome:
                ...
    """

    async def open(self) -> Any:
        """격리된 브라우저 컨텍스트 + 페이지 하나를 생성

        Raises:
            BrowserException: 브라우저 실행 실패
        """
        ...

    async def navigate(self, session: Any, url: str, ready_signal: str, timeout_ms: int) -> AttemptOutcome:
        """ready_signal까지 대기. 실패는 예외 대신 실패 AttemptOutcome으로 반환"""
        ...

    async def fill_and_submit(
        self,
        session: Any,
        input_selector: str,
        text: str,
        submit_selector: str,
        timeout_ms: int,
        element_timeout_ms: int,
    ) -> AttemptOutcome:
        """입력 필드를 비우고 한 글자씩 입력한 뒤 submit 클릭 + 내비게이션 대기"""
        ...

    async def read_content(self, session: Any) -> str:
        """현재 페이지의 렌더링된 HTML"""
        ...

    async def close(self, session: Any) -> None:
        """멱등. 절대 예외를 밖으로 던지지 않음"""
        ...
