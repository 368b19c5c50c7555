"""피드 파서 - Atom 피드를 <entry> 구간별 태그/값 레코드로 분해"""

from __future__ import annotations

import re

from ytrss.logger import get_logger
from ytrss.models import ChannelInfo, ChannelRef, Video, parse_timestamp

logger = get_logger("collector.parser")

ENTRY_MARKER = "<entry>"
TAG_REGEX = re.compile(r"<(?P<tag>.*)>(?P<value>.*)<.*>")

Record = dict[str, str]


def normalize_tag(tag: str) -> str:
    """네임스페이스 구분자(:)를 밑줄로 바꿉니다. (yt:videoId → yt_videoId)"""
    return tag.replace(":", "_")


def parse_segment(segment: str) -> Record:
    """한 구간을 줄 단위로 읽어 태그/값 레코드를 만듭니다.

    같은 태그가 반복되면 나중 값이 남습니다.
    """
    record: Record = {}
    for line in segment.splitlines():
        match = TAG_REGEX.search(line)
        if match:
            record[normalize_tag(match.group("tag"))] = match.group("value")
    return record


def parse(document: str | bytes) -> tuple[Record, list[Record]]:
    """피드 문서를 (채널 레코드, 항목 레코드 목록)으로 분해합니다.

    항목 순서는 문서 순서(최신순)를 그대로 유지합니다.
    <entry> 구분자가 하나도 없으면 ({}, [])를 반환합니다.
    """
    if isinstance(document, bytes):
        document = document.decode("utf-8", errors="replace")

    segments = document.split(ENTRY_MARKER)
    if len(segments) < 2:
        logger.debug("<entry> 구분자 없음 - 빈 피드로 처리")
        return {}, []

    channel_record = parse_segment(segments[0])
    item_records = [parse_segment(segment) for segment in segments[1:]]
    return channel_record, item_records


def to_channel_info(record: Record) -> ChannelInfo:
    """채널 레코드를 ChannelInfo로 변환합니다."""
    return ChannelInfo(
        name=record.get("name", ""),
        channel_id=record.get("yt_channelId", ""),
        uri=record.get("uri", ""),
    )


def to_videos(records: list[Record], channel: ChannelRef) -> list[Video]:
    """항목 레코드를 Video 목록으로 변환합니다. 필수 필드가 없는 항목은 건너뜁니다."""
    videos = []
    for record in records:
        video_id = record.get("yt_videoId", "")
        published = record.get("published", "")
        if not video_id or not published:
            logger.warning("%s: id/published 없는 항목 스킵 (%s)", channel, record.get("title", ""))
            continue

        try:
            published_at = parse_timestamp(published)
        except ValueError:
            logger.warning("%s: 게시 시각 해석 실패 - %s (%s)", channel, published, video_id)
            continue

        videos.append(
            Video(
                id=video_id,
                published=published_at,
                channel=channel,
                title=record.get("title", ""),
                description=record.get("media_description", ""),
                link=record.get("link", ""),
            )
        )
    return videos
