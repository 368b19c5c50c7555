"""채널 동기화 - 피드 확보 → 파싱 → 신규 필터링 → 다운로드 → 기록 갱신"""

from __future__ import annotations

from ytrss.collector import entry_parser
from ytrss.collector.listing_cache import ListingCache
from ytrss.database.download_record import DownloadRecord
from ytrss.delivery.downloader import VideoDownloader
from ytrss.logger import get_logger
from ytrss.models import ChannelRef, ChannelSyncResult

logger = get_logger("sync")


class ChannelSync:
    """채널 하나를 동기화합니다."""

    def __init__(
        self,
        cache: ListingCache,
        record: DownloadRecord,
        downloader: VideoDownloader,
        dry_run: bool = False,
    ) -> None:
        self.cache = cache
        self.record = record
        self.downloader = downloader
        self.dry_run = dry_run

    async def sync(self, channel: ChannelRef) -> ChannelSyncResult:
        """채널의 신규 영상을 모두 다운로드합니다.

        Raises:
            FetchError: 피드를 확보하지 못한 경우
            PersistenceError: 캐시/기록 파일 쓰기 실패
        """
        listing = await self.cache.get(channel)
        channel_record, item_records = entry_parser.parse(listing)

        info = entry_parser.to_channel_info(channel_record)
        result = ChannelSyncResult(channel=channel, name=info.name or channel.identifier)
        logger.info("▶ %s", result.name)

        # 중단되더라도 기록이 실제 이력의 앞부분이 되도록 오래된 것부터 처리
        videos = list(reversed(entry_parser.to_videos(item_records, channel)))
        result.total = len(videos)

        for video in videos:
            if not self.record.is_new(video):
                result.skipped += 1
                continue

            result.new += 1

            if self.dry_run:
                logger.info("[DRY-RUN] 신규 영상: %s (%s)", video.title, video.id)
                continue

            if await self.downloader.download(video.id):
                self.record.record_downloaded(video)
                result.downloaded += 1
            else:
                logger.error("%s: 다운로드 실패, 다음 실행에서 재시도 - %s", result.name, video.id)
                result.failed += 1

        if not self.dry_run:
            self.record.advance_floor(channel, videos)

        logger.info(
            "%s: 전체 %d / 신규 %d / 다운로드 %d / 실패 %d",
            result.name,
            result.total,
            result.new,
            result.downloaded,
            result.failed,
        )
        return result
