"""사람처럼 보이는 단계 간 대기 시간 생성기."""

from __future__ import annotations

import random
from typing import Optional


class PacingPolicy:
    """[min_ms, max_ms] 구간에서 균등 분포로 대기 시간을 뽑습니다.

    INPI 쪽 봇 탐지는 균일하고 즉각적인 페이지 전환을 차단하므로
    단계 사이의 대기는 생략할 수 없습니다. 이 클래스는 값만 만들고 직접 sleep하지 않습니다.
    """

    def __init__(
        self,
        min_ms: int = 1000,
        max_ms: int = 1500,
        jitter_max_ms: int = 400,
        rng: Optional[random.Random] = None,
    ):
        if min_ms < 0 or max_ms < min_ms:
            raise ValueError(f"Invalid pacing window: [{min_ms}, {max_ms}]")
        if jitter_max_ms < 0:
            raise ValueError(f"Invalid jitter_max_ms: {jitter_max_ms}")
        self.min_ms = min_ms
        self.max_ms = max_ms
        self.jitter_max_ms = jitter_max_ms
        self._rng = rng or random.Random()

    def delay(self) -> float:
        """단계 간 대기 시간 (초)"""
        return self._rng.randint(self.min_ms, self.max_ms) / 1000.0

    def jitter(self) -> float:
        """재시도 백오프에 더할 지터 (초)"""
        return self._rng.randint(0, self.jitter_max_ms) / 1000.0
