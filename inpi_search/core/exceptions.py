"""커스텀 예외 정의 (Structured Exception Hierarchy)"""
from typing import Any, Optional


# 기본 예외 클래스
class InpiSearchException(Exception):
    """기본 예외 클래스 - 모든 커스텀 예외의 부모"""
    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[dict[str, Any]] = None):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


# 크롤러 관련 예외
class CrawlerException(InpiSearchException):
    """크롤러 관련 예외의 기본 클래스"""
    def __init__(self, message: str, error_code: str = "CRAWLER_ERROR", details: Optional[dict[str, Any]] = None):
        super().__init__(message, error_code or "CRAWLER_ERROR", details)


class BrowserException(CrawlerException):
    """브라우저 실행 오류"""
    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message, "BROWSER_ERROR", details)


class ElementNotFoundException(CrawlerException):
    """페이지는 로드됐지만 기대한 폼 요소가 없음"""
    def __init__(self, selector: str, details: Optional[dict[str, Any]] = None):
        message = f"Element not found: {selector}"
        super().__init__(message, "ELEMENT_NOT_FOUND", details or {"selector": selector})


class NavigationStatusException(CrawlerException):
    """내비게이션 응답이 오류 상태 코드"""
    def __init__(self, url: str, status: int, details: Optional[dict[str, Any]] = None):
        message = f"HTTP {status} from {url}"
        super().__init__(message, "NAVIGATION_STATUS", details or {"url": url, "status": status})


class RetrievalError(CrawlerException):
    """워크플로우가 복구 불가능하게 실패했을 때 (재시도 소진 후)

    Attributes:
        kind: FailureKind (transport | timeout | element_not_found | cancelled | unrecognized_content)
        cause: 마지막 실패 원인 메시지
        last_completed_step: 실패 직전에 도달한 WorkflowState
    """
    def __init__(self, kind: Any, cause: str, last_completed_step: Any, details: Optional[dict[str, Any]] = None):
        self.kind = kind
        self.cause = cause
        self.last_completed_step = last_completed_step
        kind_value = getattr(kind, "value", str(kind))
        step_value = getattr(last_completed_step, "value", str(last_completed_step))
        message = f"Retrieval failed ({kind_value}) after '{step_value}': {cause}"
        super().__init__(
            message,
            f"RETRIEVAL_{kind_value.upper()}",
            details or {"kind": kind_value, "cause": cause, "last_completed_step": step_value},
        )


# 유효성 검증 관련 예외
class ValidationException(InpiSearchException):
    """유효성 검증 예외"""
    def __init__(self, field: str, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Validation failed for '{field}': {reason}"
        super().__init__(message, "VALIDATION_ERROR",
                        details or {"field": field, "reason": reason})


class InvalidSearchTermException(ValidationException):
    """유효하지 않은 검색어 (marca)"""
    def __init__(self, reason: str, details: Optional[dict[str, Any]] = None):
        super().__init__("marca", reason, details)


class ConfigurationException(InpiSearchException):
    """잘못된 워크플로우 구성"""
    def __init__(self, reason: str, details: Optional[dict[str, Any]] = None):
        super().__init__(f"Invalid configuration: {reason}", "CONFIG_ERROR", details or {"reason": reason})
