"""ytrss - 메인 오케스트레이터

Usage:
    python -m ytrss.main                      # 채널 목록 전체 동기화
    python -m ytrss.main --download-dir ~/Videos
    python -m ytrss.main --dry-run            # 다운로드 없이 신규 영상만 출력
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from ytrss.collector.channel_list import load_channel_list
from ytrss.collector.feed_fetcher import FeedFetcher
from ytrss.collector.listing_cache import ListingCache
from ytrss.config import DEFAULT_CONFIG_DIR, Settings
from ytrss.database.download_record import DownloadRecord
from ytrss.delivery.downloader import VideoDownloader
from ytrss.errors import ConfigError, FetchError, PersistenceError
from ytrss.logger import get_logger, setup_logger
from ytrss.models import ChannelRef, RunSummary
from ytrss.sync.channel_sync import ChannelSync

logger = get_logger("main")

EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_CONFIG_ERROR = 2
EXIT_INTERRUPTED = 130


class SyncRun:
    """채널 목록을 순서대로 동기화합니다. 한 채널의 실패는 나머지에 영향을 주지 않습니다."""

    def __init__(self, channel_sync: ChannelSync) -> None:
        self.channel_sync = channel_sync

    async def run(self, channels: list[ChannelRef]) -> RunSummary:
        summary = RunSummary(channels=len(channels))

        for channel in channels:
            try:
                result = await self.channel_sync.sync(channel)
            except FetchError as e:
                logger.error("%s: 피드를 가져오지 못해 건너뜀 - %s", channel, e.reason)
                summary.failed += 1
                summary.failed_channels.append(channel.key)
                continue
            except PersistenceError as e:
                logger.error("%s: 저장 실패로 중단 - %s", channel, e)
                summary.failed += 1
                summary.failed_channels.append(channel.key)
                continue
            except Exception as e:
                logger.error("%s: 동기화 오류 - %s", channel, e, exc_info=True)
                summary.failed += 1
                summary.failed_channels.append(channel.key)
                continue

            summary.synced += 1
            summary.downloaded += result.downloaded
            summary.download_failed += result.failed

        logger.info(
            "동기화 완료: 채널 %d/%d 성공, 다운로드 %d건, 다운로드 실패 %d건",
            summary.synced,
            summary.channels,
            summary.downloaded,
            summary.download_failed,
        )
        if summary.failed_channels:
            logger.warning("실패한 채널: %s", ", ".join(summary.failed_channels))
        return summary


def ensure_directories(*dirs: str) -> None:
    """작업 디렉토리를 만들고 쓰기 가능 여부를 확인합니다.

    Raises:
        ConfigError: 디렉토리를 만들 수 없거나 쓸 수 없는 경우
    """
    for directory in dirs:
        path = Path(directory).expanduser()
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigError(f"디렉토리를 만들 수 없습니다: {path} ({e})") from e
        if not path.is_dir():
            raise ConfigError(f"디렉토리가 아닙니다: {path}")


def build_channel_sync(settings: Settings, dry_run: bool = False) -> ChannelSync:
    """설정으로부터 동기화 구성 요소를 만듭니다."""
    fetcher = FeedFetcher(
        timeout_seconds=settings.fetch.timeout_seconds,
        user_agent=settings.fetch.user_agent,
    )
    cache = ListingCache(
        cache_dir=settings.paths.cache_dir,
        fetcher=fetcher,
        staleness=settings.sync.staleness,
    )
    record = DownloadRecord(
        record_dir=settings.paths.record_dir,
        lookback=settings.sync.lookback,
        since=settings.sync.since_time,
    )
    downloader = VideoDownloader(
        command=settings.downloader.command,
        download_dir=settings.paths.download_dir,
        extra_args=settings.downloader.extra_args,
        timeout_seconds=settings.downloader.timeout_seconds,
        retry_count=settings.downloader.retry_count,
    )
    return ChannelSync(cache=cache, record=record, downloader=downloader, dry_run=dry_run)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """CLI 인자를 파싱합니다."""
    parser = argparse.ArgumentParser(
        description="ytrss - YouTube 채널 피드를 확인하고 새 영상을 다운로드합니다",
    )
    parser.add_argument(
        "--config",
        default=None,
        help=f"설정 파일 경로 (예: {DEFAULT_CONFIG_DIR}/settings.yaml)",
    )
    parser.add_argument(
        "--env",
        default=f"{DEFAULT_CONFIG_DIR}/.env",
        help=f"환경 변수 파일 경로 (기본: {DEFAULT_CONFIG_DIR}/.env)",
    )
    parser.add_argument(
        "--channel-list",
        default=None,
        help="채널 목록 파일 (설정 파일 값을 덮어씀)",
    )
    parser.add_argument(
        "--download-dir",
        default=None,
        help="영상을 저장할 디렉토리 (설정 파일 값을 덮어씀)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="다운로드 없이 신규 영상만 출력",
    )
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> int:
    """설정을 읽고 동기화를 실행한 뒤 종료 코드를 반환합니다."""
    try:
        settings = Settings.load(config_path=args.config, env_path=args.env)
    except (FileNotFoundError, ConfigError, ValueError) as e:
        # 로거 설정 전이므로 stderr로 직접 출력
        print(f"설정 오류: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    if args.channel_list:
        settings.paths.channel_list = args.channel_list
    if args.download_dir:
        settings.paths.download_dir = args.download_dir

    setup_logger(level=settings.log.level, log_dir=settings.log.log_dir or None)

    for w in settings.validate():
        logger.warning("설정 경고: %s", w)

    try:
        channels = load_channel_list(settings.paths.channel_list)
        ensure_directories(
            settings.paths.cache_dir,
            settings.paths.record_dir,
            settings.paths.download_dir,
        )
        channel_sync = build_channel_sync(settings, dry_run=args.dry_run)
        logger.info("기록 없는 채널의 기준 시점: %s", settings.default_watermark().isoformat())
    except (ConfigError, ValueError) as e:
        logger.error("설정 오류: %s", e)
        return EXIT_CONFIG_ERROR

    summary = await SyncRun(channel_sync).run(channels)
    return EXIT_OK if summary.ok else EXIT_FAILURES


def main(argv: list[str] | None = None) -> None:
    """메인 엔트리포인트"""
    args = parse_args(argv)
    try:
        code = asyncio.run(run(args))
    except KeyboardInterrupt:
        logger.info("사용자에 의해 중단되었습니다.")
        code = EXIT_INTERRUPTED
    sys.exit(code)


if __name__ == "__main__":
    main()
