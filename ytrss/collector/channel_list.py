"""채널 목록 로더 - 텍스트 파일에서 ChannelRef 목록을 읽음"""

from __future__ import annotations

from pathlib import Path

from ytrss.errors import ConfigError
from ytrss.logger import get_logger
from ytrss.models import ChannelRef

logger = get_logger("collector.channels")


def parse_channel_list(lines: list[str]) -> list[ChannelRef]:
    """채널 목록 텍스트를 파싱합니다. 빈 줄과 '#'으로 시작하는 줄은 무시합니다.

    Raises:
        ConfigError: 형식이 잘못된 줄이 있는 경우 (줄 번호 포함)
    """
    channels = []
    for lineno, line in enumerate(lines, 1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        try:
            channels.append(ChannelRef.parse(stripped))
        except ValueError as e:
            raise ConfigError(f"채널 목록 {lineno}번째 줄: {e}") from e
    return channels


def load_channel_list(path: str | Path) -> list[ChannelRef]:
    """채널 목록 파일을 읽습니다.

    Raises:
        ConfigError: 파일이 없거나 읽을 수 없거나 형식이 잘못된 경우
    """
    list_path = Path(path).expanduser()
    try:
        text = list_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigError(f"채널 목록 파일을 찾을 수 없습니다: {list_path}") from None
    except OSError as e:
        raise ConfigError(f"채널 목록 파일을 읽을 수 없습니다: {list_path} ({e})") from e

    channels = parse_channel_list(text.splitlines())
    logger.info("채널 목록 로드: %d개 (%s)", len(channels), list_path)
    return channels
