"""INPI 상표 검색 결과 페이지 조회 서비스."""

__version__ = "1.0.0"
