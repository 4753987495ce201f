"""설정 관리 - 환경 변수 로드 및 검증"""
from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """애플리케이션 설정"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # 보안 / HTTP
    internal_api_token: str = ""
    supabase_project_url: str = "https://mqnvfjteuwqbomvbmyhd.supabase.co"
    allowed_origins: list[str] = []
    host: str = "0.0.0.0"
    port: int = 10000
    max_request_bytes: int = 200 * 1024

    # 크롤러 (브라우저)
    crawler_timeout: int = 45000
    crawler_user_agent: str = (
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/131 Safari/537.36"
    )
    crawler_headless: bool = True
    crawler_locale: str = "pt-BR"

    # Playwright 동시성 제한(서버 터짐 방지)
    crawler_browser_concurrency: int = 2

    # INPI pePI 워크플로우
    inpi_base_url: str = "https://busca.inpi.gov.br/pePI"
    inpi_nav_timeout_ms: int = 45000
    inpi_element_timeout_ms: int = 25000
    inpi_nav_max_attempts: int = 4
    # submit은 원격 세션 상태를 바꾸므로 재시도를 적게 둡니다.
    inpi_submit_max_attempts: int = 2
    inpi_base_backoff_ms: int = 800
    inpi_jitter_max_ms: int = 400
    inpi_pacing_min_ms: int = 1000
    inpi_pacing_max_ms: int = 1500
    inpi_typing_delay_min_ms: int = 5
    inpi_typing_delay_max_ms: int = 45
    inpi_run_deadline_s: float = 240.0
    inpi_teardown_timeout_s: float = 10.0
    # True면 인식되지 않는 결과 페이지를 오류로 처리
    inpi_strict_validation: bool = False

    # API
    api_title: str = "INPI 상표 검색 API"
    api_version: str = "1.0.0"
    api_description: str = "INPI pePI 상표(classe básica) 검색 결과 HTML을 브라우저 세션으로 조회합니다."

    # 로깅
    log_level: str = "INFO"

    @field_validator("internal_api_token")
    @classmethod
    def validate_internal_api_token(cls, v: str) -> str:
        if not v:
            raise ValueError("Missing INTERNAL_API_TOKEN env var")
        return v

    @field_validator(
        "crawler_timeout",
        "inpi_nav_timeout_ms",
        "inpi_element_timeout_ms",
        "inpi_base_backoff_ms",
        "max_request_bytes",
    )
    @classmethod
    def validate_positive_ms(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("timeouts and limits must be positive")
        return v

    @field_validator("inpi_run_deadline_s", "inpi_teardown_timeout_s")
    @classmethod
    def validate_positive_seconds(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("deadlines must be positive")
        return v

    @field_validator("inpi_nav_max_attempts", "inpi_submit_max_attempts", "crawler_browser_concurrency")
    @classmethod
    def validate_at_least_one(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be >= 1")
        return v

    @model_validator(mode="after")
    def validate_windows(self) -> "Settings":
        if not 0 <= self.inpi_pacing_min_ms <= self.inpi_pacing_max_ms:
            raise ValueError("inpi_pacing_min_ms must be between 0 and inpi_pacing_max_ms")
        if not 0 <= self.inpi_typing_delay_min_ms <= self.inpi_typing_delay_max_ms:
            raise ValueError("inpi_typing_delay_min_ms must be between 0 and inpi_typing_delay_max_ms")
        # 백오프가 attempt마다 엄격히 증가하려면 지터 폭이 base보다 좁아야 함
        if not 0 <= self.inpi_jitter_max_ms < self.inpi_base_backoff_ms:
            raise ValueError("inpi_jitter_max_ms must be >= 0 and smaller than inpi_base_backoff_ms")
        return self

    @property
    def cors_origins(self) -> list[str]:
        origins = list(self.allowed_origins)
        if self.supabase_project_url and self.supabase_project_url not in origins:
            origins.append(self.supabase_project_url)
        return origins


@lru_cache
def get_settings() -> Settings:
    """프로세스 시작 시 한 번 생성되는 설정 객체"""
    return Settings()
