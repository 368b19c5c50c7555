"""피드 캐시 - 채널별 피드 원문을 파일로 보관하고 오래된 경우에만 다시 요청"""

from __future__ import annotations

import time
from datetime import timedelta
from pathlib import Path

from ytrss.collector.feed_fetcher import FeedFetcher
from ytrss.database.storage import atomic_write, file_age, slot_path
from ytrss.errors import PersistenceError
from ytrss.logger import get_logger
from ytrss.models import ChannelRef

logger = get_logger("collector.cache")

DEFAULT_STALENESS = timedelta(hours=12)


class ListingCache:
    """채널별 피드 캐시 슬롯 관리"""

    def __init__(
        self,
        cache_dir: str | Path,
        fetcher: FeedFetcher,
        staleness: timedelta = DEFAULT_STALENESS,
    ) -> None:
        self.cache_dir = Path(cache_dir).expanduser()
        self.fetcher = fetcher
        self.staleness = staleness

    def slot_path(self, channel: ChannelRef) -> Path:
        return slot_path(self.cache_dir, channel)

    def is_stale(self, channel: ChannelRef) -> bool:
        """슬롯을 새로 받아야 하는지 판단합니다.

        순서대로 검사: 없음 → 오래됨 → 비어 있음. 하나라도 해당하면 True.
        """
        path = self.slot_path(channel)
        if not path.exists():
            logger.debug("%s: 캐시 없음", channel)
            return True

        age = file_age(path, time.time())
        if age >= self.staleness.total_seconds():
            logger.debug("%s: 캐시 만료 (%.0f초 경과)", channel, age)
            return True

        if path.stat().st_size == 0:
            logger.debug("%s: 빈 캐시", channel)
            return True

        return False

    async def get(self, channel: ChannelRef) -> bytes:
        """채널의 피드 원문을 반환합니다. 필요할 때만 새로 요청합니다.

        Raises:
            FetchError: 피드 요청 실패 (기존 슬롯은 그대로 유지)
            PersistenceError: 슬롯 쓰기/읽기 실패
        """
        path = self.slot_path(channel)

        if self.is_stale(channel):
            logger.info("%s: 피드 새로 받기", channel)
            data = await self.fetcher.fetch(channel.identifier, channel.kind)
            atomic_write(path, data)
        else:
            logger.debug("%s: 캐시 재사용", channel)

        try:
            return path.read_bytes()
        except OSError as e:
            raise PersistenceError(f"캐시 읽기 실패: {path} ({e})") from e
