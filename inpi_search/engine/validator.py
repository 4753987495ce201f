"""INPI 결과 페이지 분류 (순수 함수).

네트워크와 분리된 HTML 검증 로직만 담습니다.
"""

from __future__ import annotations

import re
import unicodedata

from selectolax.lexbor import LexborHTMLParser

from .result import Classification


_RESULTS_HEADING = "resultado da pesquisa"

# "Foram encontrados 5 processos que satisfazem à pesquisa."
_PROCESS_COUNT_PATTERN = re.compile(r"foram\s+encontrad[oa]s?\s*(\d+)\s*processos?")

_NO_RESULTS_KEYWORDS = (
    "nenhum resultado",
)

_SATISFYING_MARKER = "processos que satisfazem"


def _visible_text(html: str) -> str:
    try:
        tree = LexborHTMLParser(html)
        body = tree.body
        text = body.text(separator=" ") if body is not None else ""
    except Exception:
        text = ""
    return text or html


def normalize_text(text: str) -> str:
    """소문자 + 악센트 제거 + 공백 정리"""
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return re.sub(r"\s+", " ", stripped).lower()


def classify(html: str) -> Classification:
    """결과 HTML을 valid_results / valid_empty / unrecognized로 분류

    우선순위:
        1. "RESULTADO DA PESQUISA" 헤딩 → valid_results
        2. "Foram encontrados N processos" → N>0 이면 valid_results, 아니면 valid_empty
        3. "nenhum resultado" → valid_empty
        4. "processos que satisfazem" (개수 없음) → valid_results
        5. 그 외 → unrecognized
    """
    if not html:
        return Classification.UNRECOGNIZED

    text = normalize_text(_visible_text(html))

    if _RESULTS_HEADING in text:
        return Classification.VALID_RESULTS

    match = _PROCESS_COUNT_PATTERN.search(text)
    if match:
        return Classification.VALID_RESULTS if int(match.group(1)) > 0 else Classification.VALID_EMPTY

    if any(k in text for k in _NO_RESULTS_KEYWORDS):
        return Classification.VALID_EMPTY

    if _SATISFYING_MARKER in text:
        return Classification.VALID_RESULTS

    return Classification.UNRECOGNIZED


class ResultValidator:
    """classify()를 워크플로우에 주입하기 위한 얇은 래퍼"""

    def classify(self, html: str) -> Classification:
        return classify(html)
