"""피드 요청기 - 채널 종류별 피드 URL 생성 및 HTTP 다운로드"""

from __future__ import annotations

import requests

from ytrss.errors import FetchError
from ytrss.logger import get_logger
from ytrss.models import ChannelKind, ChannelRef

logger = get_logger("collector.fetcher")

FEED_URL_TEMPLATES: dict[ChannelKind, str] = {
    ChannelKind.CHANNEL: "https://www.youtube.com/feeds/videos.xml?channel_id=%s",
    ChannelKind.USER: "https://www.youtube.com/feeds/videos.xml?user=%s",
}


def build_url(channel: ChannelRef) -> str:
    """채널 참조로부터 피드 URL을 만듭니다."""
    return FEED_URL_TEMPLATES[channel.kind] % channel.identifier


class FeedFetcher:
    """채널 피드 원문을 내려받습니다."""

    def __init__(self, timeout_seconds: int = 30, user_agent: str = "ytrss/0.1") -> None:
        self.timeout_seconds = timeout_seconds
        self.user_agent = user_agent

    async def fetch(self, identifier: str, kind: ChannelKind) -> bytes:
        """피드 원문을 반환합니다.

        Raises:
            FetchError: 네트워크 오류 또는 2xx가 아닌 응답
        """
        url = build_url(ChannelRef(kind=kind, identifier=identifier))
        logger.debug("피드 요청: %s", url)

        try:
            response = requests.get(
                url,
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(identifier, str(e)) from e

        if not response.content:
            raise FetchError(identifier, "빈 응답")

        logger.debug("피드 수신: %s (%d bytes)", identifier, len(response.content))
        return response.content
