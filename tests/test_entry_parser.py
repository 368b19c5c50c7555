"""피드 파서 테스트"""

from datetime import datetime, timezone

from ytrss.collector import entry_parser
from ytrss.models import ChannelKind, ChannelRef

CHANNEL = ChannelRef(kind=ChannelKind.CHANNEL, identifier="UCTjqo_3046IXFFGZ_M5jedA")


class TestParse:
    """parse() 테스트"""

    def test_channel_record(self, sample_feed):
        """첫 구간에서 채널 정보 추출"""
        channel_record, _ = entry_parser.parse(sample_feed)
        assert channel_record["name"] == "jackisanerd"
        assert channel_record["yt_channelId"] == "UCTjqo_3046IXFFGZ_M5jedA"

    def test_item_records_in_document_order(self, sample_feed):
        """항목은 문서 순서(최신순) 그대로"""
        _, items = entry_parser.parse(sample_feed)
        assert len(items) == 2
        assert items[0]["yt_videoId"] == "Ah6xjqA0Cj0"
        assert items[0]["title"] == "Day 4"
        assert items[0]["published"] == "2018-03-03T05:59:29+00:00"
        assert items[1]["yt_videoId"] == "pQ3xV7mLk2E"
        assert items[1]["title"] == "Day 3"

    def test_unrecognized_tags_ignored(self):
        """알 수 없는 태그나 태그 없는 줄은 결과에 영향 없음"""
        document = "\n".join([
            "<feed>",
            "<name>chan</name>",
            "<yt:channelId>C1</yt:channelId>",
            "<entry>",
            "<yt:videoId>v1</yt:videoId>",
            "<weird:extra>x</weird:extra>",
            "just some text",
            '<media:thumbnail url="a.jpg"/>',
            "<title>one</title>",
            "<published>2020-01-01T00:00:00+00:00</published>",
            "</entry>",
        ])
        channel_record, items = entry_parser.parse(document)
        assert channel_record == {"name": "chan", "yt_channelId": "C1"}
        assert len(items) == 1
        assert items[0]["yt_videoId"] == "v1"
        assert items[0]["title"] == "one"
        assert items[0]["weird_extra"] == "x"

    def test_repeated_tag_last_wins(self):
        """같은 태그가 반복되면 나중 값"""
        _, items = entry_parser.parse("<entry>\n<title>first</title>\n<title>second</title>\n")
        assert items[0]["title"] == "second"

    def test_no_entry_marker(self):
        """<entry>가 없으면 빈 결과 (예외 없음)"""
        assert entry_parser.parse("<html><body>Not Found</body></html>") == ({}, [])
        assert entry_parser.parse(b"") == ({}, [])

    def test_bytes_input(self, sample_feed):
        """bytes와 str 입력 결과가 같음"""
        assert entry_parser.parse(sample_feed) == entry_parser.parse(sample_feed.decode("utf-8"))


class TestNormalizeTag:
    """normalize_tag() 테스트"""

    def test_namespace_separator(self):
        assert entry_parser.normalize_tag("yt:videoId") == "yt_videoId"
        assert entry_parser.normalize_tag("title") == "title"


class TestConversion:
    """레코드 → 모델 변환 테스트"""

    def test_to_channel_info(self, sample_feed):
        channel_record, _ = entry_parser.parse(sample_feed)
        info = entry_parser.to_channel_info(channel_record)
        assert info.name == "jackisanerd"
        assert info.channel_id == "UCTjqo_3046IXFFGZ_M5jedA"

    def test_to_videos(self, sample_feed):
        _, items = entry_parser.parse(sample_feed)
        videos = entry_parser.to_videos(items, CHANNEL)
        assert [v.id for v in videos] == ["Ah6xjqA0Cj0", "pQ3xV7mLk2E"]
        assert videos[0].published == datetime(2018, 3, 3, 5, 59, 29, tzinfo=timezone.utc)
        assert videos[0].description == "Fourth day of the challenge."
        assert videos[0].channel == CHANNEL

    def test_to_videos_skips_incomplete(self):
        """ID나 게시 시각이 없거나 잘못된 항목은 제외"""
        records = [
            {"title": "no id", "published": "2020-01-01T00:00:00+00:00"},
            {"yt_videoId": "no_date"},
            {"yt_videoId": "bad_date", "published": "yesterday"},
            {"yt_videoId": "ok", "published": "2020-01-01T00:00:00"},
        ]
        videos = entry_parser.to_videos(records, CHANNEL)
        assert [v.id for v in videos] == ["ok"]
        assert videos[0].published.tzinfo is not None
