"""다운로드 기록 - 채널별 JSON 파일로 이미 받은 영상을 관리하고 신규 여부를 판단"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

from ytrss.database.storage import atomic_write, format_timestamp, slot_path
from ytrss.logger import get_logger
from ytrss.models import ChannelRef, Video, parse_timestamp

logger = get_logger("database.record")

DEFAULT_LOOKBACK = timedelta(days=7)


class DownloadRecord:
    """채널별 다운로드 기록 - 중복 체크 및 기록 갱신

    기록 파일 형식:
        {"time": 마지막 다운로드 영상의 게시 시각,
         "id": 마지막 다운로드 영상 ID,
         "floor": 기준 시점 (이 시점 이전 게시 영상은 신규 아님),
         "seen": {영상 ID: 게시 시각, ...}}

    기록이 없는 채널은 since 또는 now - lookback을 기준 시점으로 사용하고,
    기록이 생기면 그 시점을 floor로 저장해 이후 실행에서는 파일 값만 봅니다.
    floor는 현재 목록의 가장 오래된 영상까지만 전진하며, 그 이전 항목은
    seen에서 정리됩니다.
    """

    def __init__(
        self,
        record_dir: str | Path,
        lookback: timedelta = DEFAULT_LOOKBACK,
        since: datetime | None = None,
    ) -> None:
        self.record_dir = Path(record_dir).expanduser()
        self.lookback = lookback
        self.since = since
        self._loaded: dict[str, dict] = {}

    def record_path(self, channel: ChannelRef) -> Path:
        return slot_path(self.record_dir, channel, ".json")

    def default_watermark(self, now: datetime | None = None) -> datetime:
        """기록이 없는 채널에 적용할 기준 시점"""
        if self.since is not None:
            return self.since
        now = now or datetime.now(timezone.utc)
        return now - self.lookback

    def watermark_for(self, channel: ChannelRef, now: datetime | None = None) -> datetime:
        """이 시점 이전(포함)에 게시된 영상은 신규로 보지 않습니다."""
        floor = self._floor(self._read(channel))
        if floor is not None:
            return floor
        return self.default_watermark(now)

    @staticmethod
    def _floor(data: dict) -> datetime | None:
        # floor가 없는 기록은 마지막 다운로드 시각을 기준으로 삼는다
        for key in ("floor", "time"):
            if key not in data:
                continue
            try:
                return parse_timestamp(data[key])
            except (AttributeError, TypeError, ValueError):
                continue
        return None

    def _read(self, channel: ChannelRef) -> dict:
        if channel.key in self._loaded:
            return self._loaded[channel.key]

        data = self._load(channel)
        self._loaded[channel.key] = data
        return data

    def _load(self, channel: ChannelRef) -> dict:
        path = self.record_path(channel)
        if not path.exists():
            return {}

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            # 손상된 기록은 없는 것으로 본다 (lookback 범위 재다운로드)
            logger.warning("%s: 기록 파일을 읽을 수 없어 무시합니다 - %s", channel, e)
            return {}

        if not isinstance(data, dict):
            logger.warning("%s: 기록 파일 형식 오류 - 무시합니다", channel)
            return {}
        return data

    def _seen(self, data: dict) -> dict[str, str]:
        seen = data.get("seen", {})
        return dict(seen) if isinstance(seen, dict) else {}

    def seen_ids(self, channel: ChannelRef) -> set[str]:
        return set(self._seen(self._read(channel)))

    def latest(self, channel: ChannelRef) -> tuple[datetime, str] | None:
        """마지막으로 다운로드한 영상의 (게시 시각, ID)"""
        data = self._read(channel)
        if "time" not in data or "id" not in data:
            return None
        try:
            return parse_timestamp(data["time"]), data["id"]
        except (AttributeError, TypeError, ValueError):
            return None

    def is_new(self, video: Video) -> bool:
        """기준 시점 이후에 게시되었고 아직 받지 않은 영상이면 True"""
        if video.published <= self.watermark_for(video.channel):
            return False
        return video.id not in self.seen_ids(video.channel)

    def record_downloaded(self, video: Video) -> None:
        """다운로드 완료를 기록합니다.

        Raises:
            PersistenceError: 기록 파일 쓰기 실패
        """
        data = self._read(video.channel)
        floor = min(self.watermark_for(video.channel), video.published)

        seen = self._seen(data)
        seen[video.id] = format_timestamp(video.published)

        record = {
            "time": format_timestamp(video.published),
            "id": video.id,
            "floor": format_timestamp(floor),
            "seen": self._prune(seen, floor),
        }
        self._write(video.channel, record)
        logger.debug(
            "%s: 기록 갱신 (id=%s, 보관 %d건)", video.channel, video.id, len(record["seen"])
        )

    def advance_floor(self, channel: ChannelRef, videos: list[Video]) -> None:
        """현재 목록의 가장 오래된 영상까지 기준 시점을 전진시킵니다.

        그 시점 이하에 아직 받지 못한 영상이 있거나 기록이 없으면 그대로 둡니다.

        Raises:
            PersistenceError: 기록 파일 쓰기 실패
        """
        data = self._read(channel)
        if not videos or not data:
            return

        oldest = min(video.published for video in videos)
        if any(self.is_new(video) and video.published <= oldest for video in videos):
            return

        floor = self.watermark_for(channel)
        if oldest <= floor:
            return

        record = dict(data)
        record["floor"] = format_timestamp(oldest)
        record["seen"] = self._prune(self._seen(data), oldest)
        self._write(channel, record)
        logger.debug("%s: 기준 시점 전진 → %s", channel, record["floor"])

    @staticmethod
    def _prune(seen: dict[str, str], floor: datetime) -> dict[str, str]:
        pruned = {}
        for video_id, published in seen.items():
            try:
                if parse_timestamp(published) > floor:
                    pruned[video_id] = published
            except (AttributeError, TypeError, ValueError):
                continue
        return pruned

    def _write(self, channel: ChannelRef, record: dict) -> None:
        payload = json.dumps(record, ensure_ascii=False, indent=2).encode("utf-8")
        atomic_write(self.record_path(channel), payload)
        self._loaded[channel.key] = record
