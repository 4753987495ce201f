"""`python -m inpi_search` - uvicorn으로 서버 실행

SIGTERM/SIGINT는 uvicorn이 처리하고, 진행 중 요청은 최대 10초까지 기다린 뒤 종료합니다.
"""
import uvicorn

from inpi_search.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "inpi_search.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        timeout_graceful_shutdown=10,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
