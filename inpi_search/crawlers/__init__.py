"""INPI 브라우저 세션 드라이버.

공개 API는 이 파일에서만 export합니다.
"""

from .driver import SessionDriver

__all__ = [
        "SessionDriver",
]
