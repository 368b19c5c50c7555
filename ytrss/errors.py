"""예외 정의 - 설정/수집/저장 단계별 오류 분류"""

from __future__ import annotations


class YtRssError(Exception):
    """ytrss 예외의 기본 클래스"""


class ConfigError(YtRssError):
    """실행 전체를 중단해야 하는 설정 오류 (채널 목록 없음 등)"""


class FetchError(YtRssError):
    """채널 피드를 가져오지 못함 - 해당 채널만 이번 실행에서 건너뜀"""

    def __init__(self, identifier: str, reason: str) -> None:
        super().__init__(f"{identifier}: {reason}")
        self.identifier = identifier
        self.reason = reason


class PersistenceError(YtRssError):
    """캐시 또는 다운로드 기록 파일을 쓰지 못함"""
