"""데이터 모델 정의 - 채널 참조, 채널 정보, 영상 항목"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class ChannelKind(Enum):
    """채널 식별 방식"""

    CHANNEL = "channel"
    USER = "user"


@dataclass(frozen=True)
class ChannelRef:
    """채널 목록의 한 줄 - `kind/identifier [# note]`"""

    kind: ChannelKind
    identifier: str
    note: str | None = None

    @classmethod
    def parse(cls, line: str) -> ChannelRef:
        """채널 목록의 한 줄을 ChannelRef로 변환합니다.

        Raises:
            ValueError: 형식이 잘못되었거나 kind를 알 수 없는 경우
        """
        ref, _, note = line.partition("#")
        ref = ref.strip()
        note = note.strip() or None

        kind_name, sep, identifier = ref.partition("/")
        if not sep or not identifier:
            raise ValueError(f"'kind/identifier' 형식이 아닙니다: {line.strip()!r}")

        try:
            kind = ChannelKind(kind_name.strip().lower())
        except ValueError:
            raise ValueError(f"알 수 없는 채널 종류: {kind_name!r}") from None

        identifier = identifier.strip()
        # 식별자는 캐시/기록 파일 이름으로 쓰인다
        if "/" in identifier or "\\" in identifier or identifier in (".", ".."):
            raise ValueError(f"사용할 수 없는 식별자: {identifier!r}")

        return cls(kind=kind, identifier=identifier, note=note)

    @property
    def key(self) -> str:
        """캐시/기록 슬롯 키 (kind/identifier)"""
        return f"{self.kind.value}/{self.identifier}"

    def __str__(self) -> str:
        return self.key


@dataclass
class ChannelInfo:
    """피드 첫 구간에서 추출한 채널 메타데이터"""

    name: str = ""
    channel_id: str = ""
    uri: str = ""


@dataclass
class Video:
    """피드의 영상 항목"""

    id: str
    published: datetime
    channel: ChannelRef
    title: str = ""
    description: str = ""
    link: str = ""


@dataclass
class ChannelSyncResult:
    """채널 하나의 동기화 결과"""

    channel: ChannelRef
    name: str = ""
    total: int = 0
    new: int = 0
    downloaded: int = 0
    failed: int = 0
    skipped: int = 0


@dataclass
class RunSummary:
    """전체 실행 요약"""

    channels: int = 0
    synced: int = 0
    failed: int = 0
    downloaded: int = 0
    download_failed: int = 0
    failed_channels: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.failed == 0 and self.download_failed == 0


def parse_timestamp(value: str) -> datetime:
    """ISO-8601 문자열을 timezone-aware datetime으로 변환합니다.

    오프셋이 없는 값은 UTC로 간주합니다.
    """
    parsed = datetime.fromisoformat(value.strip())
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
