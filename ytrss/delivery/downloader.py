"""영상 다운로더 - 외부 다운로드 프로그램(yt-dlp) 실행"""

from __future__ import annotations

import asyncio
from pathlib import Path

from ytrss.logger import get_logger

logger = get_logger("delivery.downloader")


class VideoDownloader:
    """영상 ID를 외부 다운로드 명령에 넘겨 실행합니다."""

    def __init__(
        self,
        command: list[str] | None = None,
        download_dir: str | Path = ".",
        extra_args: list[str] | None = None,
        timeout_seconds: int = 3600,
        retry_count: int = 0,
    ) -> None:
        self.command = command or ["yt-dlp"]
        self.download_dir = Path(download_dir).expanduser()
        self.extra_args = extra_args or []
        self.timeout_seconds = timeout_seconds
        self.retry_count = retry_count

    def build_args(self, video_id: str) -> list[str]:
        # "-"로 시작하는 ID가 옵션으로 해석되지 않도록 "--" 뒤에 둔다
        return [*self.command, *self.extra_args, "--", video_id]

    async def download(self, video_id: str) -> bool:
        """영상을 다운로드합니다.

        Returns:
            다운로드 성공 여부 (종료 코드 0)
        """
        attempts = self.retry_count + 1
        for attempt in range(attempts):
            if await self._run_once(video_id, attempt + 1, attempts):
                return True

            if attempt < attempts - 1:
                # 지수 백오프
                wait_time = 2 ** (attempt + 1)
                logger.info("%d초 후 재시도: %s", wait_time, video_id)
                await asyncio.sleep(wait_time)

        logger.error("다운로드 최종 실패: %s", video_id)
        return False

    async def _run_once(self, video_id: str, attempt: int, attempts: int) -> bool:
        args = self.build_args(video_id)
        logger.info("다운로드 시작 (%d/%d): %s", attempt, attempts, video_id)

        try:
            self.download_dir.mkdir(parents=True, exist_ok=True)
            process = await asyncio.create_subprocess_exec(*args, cwd=self.download_dir)
        except FileNotFoundError:
            logger.error("다운로드 명령을 찾을 수 없습니다: %s", self.command[0])
            return False
        except OSError as e:
            logger.error("다운로드 명령 실행 실패: %s - %s", video_id, e)
            return False

        try:
            returncode = await asyncio.wait_for(process.wait(), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.error("다운로드 시간 초과 (%d초): %s", self.timeout_seconds, video_id)
            process.kill()
            await process.wait()
            return False

        if returncode != 0:
            logger.warning("다운로드 실패 (종료 코드 %d): %s", returncode, video_id)
            return False

        logger.info("다운로드 완료: %s", video_id)
        return True
