"""공용 테스트 픽스처 - 가짜 피드 요청기/다운로더 및 피드 생성기"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from ytrss.errors import FetchError
from ytrss.models import ChannelKind

FIXTURES = Path(__file__).parent / "fixtures"


class FakeFetcher:
    """호출 기록을 남기는 가짜 피드 요청기"""

    def __init__(self, data: bytes = b"", error: str | None = None) -> None:
        self.data = data
        self.error = error
        self.calls: list[tuple[str, ChannelKind]] = []

    async def fetch(self, identifier: str, kind: ChannelKind) -> bytes:
        self.calls.append((identifier, kind))
        if self.error:
            raise FetchError(identifier, self.error)
        return self.data


class FakeDownloader:
    """지정한 ID만 실패하는 가짜 다운로더"""

    def __init__(self, fail_ids: set[str] | None = None) -> None:
        self.fail_ids = fail_ids or set()
        self.calls: list[str] = []

    async def download(self, video_id: str) -> bool:
        self.calls.append(video_id)
        return video_id not in self.fail_ids


def make_listing(
    name: str,
    channel_id: str,
    entries: list[tuple[str, str, datetime]],
) -> bytes:
    """(영상 ID, 제목, 게시 시각) 목록으로 YouTube 형식의 피드를 만듭니다. 최신순으로 넣어야 합니다."""
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<feed xmlns:yt="http://www.youtube.com/xml/schemas/2015" xmlns="http://www.w3.org/2005/Atom">',
        f" <yt:channelId>{channel_id}</yt:channelId>",
        f" <title>{name}</title>",
        " <author>",
        f"  <name>{name}</name>",
        " </author>",
    ]
    for video_id, title, published in entries:
        lines += [
            " <entry>",
            f"  <yt:videoId>{video_id}</yt:videoId>",
            f"  <title>{title}</title>",
            f"  <published>{published.isoformat()}</published>",
            " </entry>",
        ]
    lines.append("</feed>")
    return "\n".join(lines).encode("utf-8")


@pytest.fixture
def sample_feed() -> bytes:
    """실제 YouTube 피드 형식의 샘플"""
    return (FIXTURES / "videos.xml").read_bytes()
