"""DownloadRecord 테스트 - 신규 판단 및 기록 갱신"""

import json
from datetime import datetime, timedelta, timezone

import pytest

from ytrss.database.download_record import DownloadRecord
from ytrss.errors import PersistenceError
from ytrss.models import ChannelRef, Video

CHANNEL = ChannelRef.parse("channel/ABC123")
T = datetime(2020, 6, 1, 12, 0, tzinfo=timezone.utc)


def video(video_id: str, published: datetime, channel: ChannelRef = CHANNEL) -> Video:
    return Video(id=video_id, published=published, channel=channel, title=video_id)


@pytest.fixture
def record(tmp_path):
    """기준 시점을 T로 고정한 기록"""
    return DownloadRecord(record_dir=tmp_path / "records", since=T)


class TestFreshness:
    """is_new() 테스트"""

    def test_after_watermark_is_new(self, record):
        assert record.is_new(video("a", T + timedelta(seconds=1))) is True

    def test_before_watermark_is_not_new(self, record):
        assert record.is_new(video("a", T - timedelta(days=1))) is False

    def test_boundary_is_not_new(self, record):
        """기준 시점과 같으면 신규 아님"""
        assert record.is_new(video("a", T)) is False

    def test_default_lookback(self, tmp_path):
        """기록이 없으면 기본 lookback 이전 항목은 제외"""
        record = DownloadRecord(tmp_path, lookback=timedelta(days=7))
        now = datetime.now(timezone.utc)
        assert record.is_new(video("recent", now - timedelta(days=1))) is True
        assert record.is_new(video("old", now - timedelta(days=8))) is False

    def test_recorded_item_is_not_new(self, record):
        v = video("a", T + timedelta(hours=1))
        record.record_downloaded(v)
        assert record.is_new(v) is False

    def test_late_older_item_still_new(self, record):
        """더 최근 영상을 받은 뒤 늦게 올라온 이전 영상도 감지"""
        record.record_downloaded(video("newer", T + timedelta(hours=5)))
        assert record.is_new(video("older", T + timedelta(hours=1))) is True

    def test_same_timestamp_different_id(self, record):
        """게시 시각이 같아도 ID가 다르면 신규"""
        stamp = T + timedelta(hours=2)
        record.record_downloaded(video("a", stamp))
        assert record.is_new(video("b", stamp)) is True

    def test_channels_are_independent(self, record):
        other = ChannelRef.parse("user/ABC123")
        record.record_downloaded(video("a", T + timedelta(hours=1)))
        assert record.is_new(video("a", T + timedelta(hours=1), channel=other)) is True


class TestRecordDownloaded:
    """record_downloaded() 테스트"""

    def test_file_format(self, record):
        v = video("a", T + timedelta(hours=1))
        record.record_downloaded(v)

        data = json.loads(record.record_path(CHANNEL).read_text())
        assert data["time"] == "2020-06-01T13:00:00+00:00"
        assert data["id"] == "a"
        assert data["floor"] == "2020-06-01T12:00:00+00:00"
        assert data["seen"] == {"a": "2020-06-01T13:00:00+00:00"}

    def test_floor_not_after_first_download(self, tmp_path):
        """기록 생성 시 floor는 기본 기준 시점과 첫 영상 중 이른 쪽"""
        record = DownloadRecord(tmp_path, lookback=timedelta(days=7))
        now = datetime.now(timezone.utc)
        record.record_downloaded(video("old", now - timedelta(days=20)))

        assert record.watermark_for(CHANNEL) == now - timedelta(days=20)
        assert record.is_new(video("missed", now - timedelta(days=10))) is True

    def test_persisted_floor_ignores_lookback(self, tmp_path):
        """기록이 있으면 now - lookback이 아니라 저장된 floor를 사용"""
        now = datetime.now(timezone.utc)
        path = DownloadRecord(tmp_path).record_path(CHANNEL)
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({
            "time": (now - timedelta(days=20)).isoformat(),
            "id": "old",
            "floor": (now - timedelta(days=27)).isoformat(),
            "seen": {"old": (now - timedelta(days=20)).isoformat()},
        }))

        record = DownloadRecord(tmp_path, lookback=timedelta(days=7))
        assert record.watermark_for(CHANNEL) == now - timedelta(days=27)
        assert record.is_new(video("missed", now - timedelta(days=10))) is True
        assert record.is_new(video("old", now - timedelta(days=20))) is False

    def test_reads_file_once(self, record):
        """같은 채널의 기록 파일은 한 번만 읽고 이후에는 메모리 값을 사용"""
        v = video("a", T + timedelta(hours=1))
        record.record_downloaded(v)
        record.record_path(CHANNEL).unlink()

        assert record.is_new(v) is False
        assert record.latest(CHANNEL) == (v.published, "a")


class TestAdvanceFloor:
    """advance_floor() 테스트"""

    def test_advances_to_oldest_listed(self, record):
        v1 = video("v1", T + timedelta(hours=1))
        v2 = video("v2", T + timedelta(hours=2))
        record.record_downloaded(v1)
        record.record_downloaded(v2)

        record.advance_floor(CHANNEL, [v2, v1])

        assert record.watermark_for(CHANNEL) == v1.published
        assert record.seen_ids(CHANNEL) == {"v2"}
        data = json.loads(record.record_path(CHANNEL).read_text())
        assert data["floor"] == "2020-06-01T13:00:00+00:00"

    def test_pending_oldest_blocks_advance(self, record):
        """가장 오래된 영상을 아직 받지 못했으면 그대로 둠"""
        v1 = video("v1", T + timedelta(hours=1))
        v2 = video("v2", T + timedelta(hours=2))
        record.record_downloaded(v2)

        record.advance_floor(CHANNEL, [v2, v1])

        assert record.watermark_for(CHANNEL) == T
        assert record.is_new(v1) is True

    def test_never_moves_backwards(self, record):
        v2 = video("v2", T + timedelta(hours=2))
        record.record_downloaded(v2)
        record.advance_floor(CHANNEL, [v2])

        record.advance_floor(CHANNEL, [video("v0", T - timedelta(days=1))])

        assert record.watermark_for(CHANNEL) == v2.published

    def test_no_record_no_write(self, record):
        """기록이 없는 채널에는 파일을 만들지 않음"""
        record.advance_floor(CHANNEL, [video("a", T + timedelta(hours=1))])
        assert not record.record_path(CHANNEL).exists()

    def test_latest(self, record):
        assert record.latest(CHANNEL) is None
        record.record_downloaded(video("a", T + timedelta(hours=1)))
        record.record_downloaded(video("b", T + timedelta(hours=2)))
        assert record.latest(CHANNEL) == (T + timedelta(hours=2), "b")
        assert record.seen_ids(CHANNEL) == {"a", "b"}

    def test_prunes_entries_before_watermark(self, tmp_path):
        """기준 시점 이전 항목은 seen에서 정리"""
        record = DownloadRecord(tmp_path, lookback=timedelta(days=7))
        now = datetime.now(timezone.utc)
        path = record.record_path(CHANNEL)
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({
            "time": (now - timedelta(days=30)).isoformat(),
            "id": "ancient",
            "seen": {"ancient": (now - timedelta(days=30)).isoformat()},
        }))

        record.record_downloaded(video("fresh", now - timedelta(hours=1)))
        assert record.seen_ids(CHANNEL) == {"fresh"}

    def test_corrupt_record_treated_as_missing(self, record):
        path = record.record_path(CHANNEL)
        path.parent.mkdir(parents=True)
        path.write_text("{not json")

        assert record.latest(CHANNEL) is None
        assert record.is_new(video("a", T + timedelta(hours=1))) is True
        record.record_downloaded(video("a", T + timedelta(hours=1)))
        assert record.seen_ids(CHANNEL) == {"a"}

    def test_write_failure_raises(self, tmp_path):
        """기록 디렉토리를 만들 수 없으면 PersistenceError"""
        blocker = tmp_path / "records"
        blocker.write_text("not a directory")
        record = DownloadRecord(record_dir=blocker, since=T)

        with pytest.raises(PersistenceError):
            record.record_downloaded(video("a", T + timedelta(hours=1)))
