"""파일 저장 헬퍼 - 원자적 쓰기 및 슬롯 경로 계산"""

from __future__ import annotations

import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from ytrss.errors import PersistenceError
from ytrss.models import ChannelRef


def slot_path(root: Path, channel: ChannelRef, suffix: str = "") -> Path:
    """채널의 슬롯 파일 경로 (root/<kind>/<identifier><suffix>)"""
    return root / channel.kind.value / f"{channel.identifier}{suffix}"


def atomic_write(path: Path, data: bytes) -> None:
    """임시 파일에 쓴 뒤 rename하여 반쯤 쓰인 파일이 남지 않게 합니다.

    Raises:
        PersistenceError: 디렉토리 생성, 쓰기, rename 중 하나라도 실패한 경우
    """
    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name and os.path.exists(tmp_name):
            os.remove(tmp_name)
        raise PersistenceError(f"파일 쓰기 실패: {path} ({e})") from e


def format_timestamp(value: datetime) -> str:
    """datetime을 기록 파일용 ISO-8601 문자열로 변환합니다."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def file_age(path: Path, now: float) -> float:
    """파일 수정 시각 기준 경과 시간(초)"""
    return now - path.stat().st_mtime
