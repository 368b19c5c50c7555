"""설정 관리 모듈 - YAML + .env 기반 설정 로드 및 검증"""

from __future__ import annotations

import os
import shutil
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path

import yaml
from dotenv import load_dotenv

from ytrss.errors import ConfigError
from ytrss.models import parse_timestamp

DEFAULT_CONFIG_DIR = "~/.config/youtube-rss"


@dataclass
class PathsConfig:
    """파일/디렉토리 경로 설정"""

    channel_list: str = f"{DEFAULT_CONFIG_DIR}/channel_list.txt"
    cache_dir: str = "~/.cache/youtube-rss/listings"
    record_dir: str = f"{DEFAULT_CONFIG_DIR}/records"
    download_dir: str = "."


@dataclass
class SyncConfig:
    """동기화 정책 설정"""

    staleness_hours: float = 12
    lookback_days: float = 7
    since: str = ""  # 지정 시 lookback_days 대신 고정 시점을 기준으로 사용

    @property
    def staleness(self) -> timedelta:
        return timedelta(hours=self.staleness_hours)

    @property
    def lookback(self) -> timedelta:
        return timedelta(days=self.lookback_days)

    @property
    def since_time(self) -> datetime | None:
        """고정 기준 시점 (없으면 None)"""
        if not self.since:
            return None
        return parse_timestamp(self.since)


@dataclass
class DownloaderConfig:
    """다운로드 실행 설정"""

    command: list[str] = field(default_factory=lambda: ["yt-dlp"])
    extra_args: list[str] = field(default_factory=list)
    timeout_seconds: int = 3600
    retry_count: int = 0


@dataclass
class FetchConfig:
    """피드 요청 설정"""

    timeout_seconds: int = 30
    user_agent: str = "ytrss/0.1"


@dataclass
class LogConfig:
    """로깅 설정"""

    level: str = "INFO"
    log_dir: str = ""


@dataclass
class Settings:
    """전체 애플리케이션 설정"""

    paths: PathsConfig = field(default_factory=PathsConfig)
    sync: SyncConfig = field(default_factory=SyncConfig)
    downloader: DownloaderConfig = field(default_factory=DownloaderConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    log: LogConfig = field(default_factory=LogConfig)

    @classmethod
    def load(
        cls,
        config_path: str | None = None,
        env_path: str = f"{DEFAULT_CONFIG_DIR}/.env",
    ) -> Settings:
        """설정 파일과 환경 변수를 로드하여 Settings 인스턴스를 생성합니다.

        config_path가 None이면 기본값만 사용합니다.

        Raises:
            FileNotFoundError: 지정한 설정 파일이 없는 경우
            ConfigError: YAML 문법 오류 또는 섹션 형식 오류
        """
        env_file = Path(env_path).expanduser()
        if env_file.exists():
            load_dotenv(env_file)

        if config_path is None:
            return cls._from_dict({})

        config_file = Path(config_path).expanduser()
        if not config_file.exists():
            raise FileNotFoundError(f"설정 파일을 찾을 수 없습니다: {config_path}")

        try:
            with open(config_file, encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"설정 파일을 해석할 수 없습니다: {config_path} ({e})") from e

        if not isinstance(raw, dict):
            raise ConfigError(f"설정 파일의 최상위 값은 매핑이어야 합니다: {config_path}")

        return cls._from_dict(raw)

    @staticmethod
    def _section(raw: dict, name: str) -> dict:
        """섹션 값을 돌려줍니다. 비어 있으면 빈 딕셔너리로 봅니다."""
        section = raw.get(name) or {}
        if not isinstance(section, dict):
            raise ConfigError(f"'{name}' 섹션은 매핑이어야 합니다")
        return section

    @classmethod
    def _from_dict(cls, raw: dict) -> Settings:
        """딕셔너리에서 Settings 인스턴스를 생성합니다."""
        defaults = PathsConfig()
        paths_raw = cls._section(raw, "paths")
        paths = PathsConfig(
            channel_list=cls._resolve_env(
                paths_raw.get("channel_list", defaults.channel_list)
            ),
            cache_dir=cls._resolve_env(paths_raw.get("cache_dir", defaults.cache_dir)),
            record_dir=cls._resolve_env(
                paths_raw.get("record_dir", defaults.record_dir)
            ),
            download_dir=cls._resolve_env(
                paths_raw.get("download_dir", defaults.download_dir)
            ),
        )

        sync_raw = cls._section(raw, "sync")
        sync = SyncConfig(
            staleness_hours=sync_raw.get("staleness_hours", 12),
            lookback_days=sync_raw.get("lookback_days", 7),
            since=str(sync_raw.get("since", "") or ""),
        )

        dl_raw = cls._section(raw, "downloader")
        command = dl_raw.get("command", ["yt-dlp"])
        if isinstance(command, str):
            command = command.split()
        downloader = DownloaderConfig(
            command=command,
            extra_args=dl_raw.get("extra_args", []),
            timeout_seconds=dl_raw.get("timeout_seconds", 3600),
            retry_count=dl_raw.get("retry_count", 0),
        )

        fetch_raw = cls._section(raw, "fetch")
        fetch = FetchConfig(
            timeout_seconds=fetch_raw.get("timeout_seconds", 30),
            user_agent=fetch_raw.get("user_agent", "ytrss/0.1"),
        )

        log_raw = cls._section(raw, "log")
        log = LogConfig(
            level=os.getenv("LOG_LEVEL") or log_raw.get("level", "INFO"),
            log_dir=cls._resolve_env(log_raw.get("log_dir", "")),
        )

        return cls(paths=paths, sync=sync, downloader=downloader, fetch=fetch, log=log)

    @staticmethod
    def _resolve_env(value: str) -> str:
        """${ENV_VAR} 형식의 값을 환경 변수로 치환합니다."""
        if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
            env_key = value[2:-1]
            return os.getenv(env_key, "")
        return value

    def default_watermark(self, now: datetime | None = None) -> datetime:
        """기록이 없는 채널에 적용할 기본 기준 시점"""
        since = self.sync.since_time
        if since is not None:
            return since
        now = now or datetime.now(timezone.utc)
        return now - self.sync.lookback

    def validate(self) -> list[str]:
        """설정 값의 유효성을 검사하고 경고 메시지 리스트를 반환합니다."""
        warnings = []

        if not self.downloader.command:
            warnings.append("다운로드 명령이 설정되지 않았습니다.")
        elif shutil.which(self.downloader.command[0]) is None:
            warnings.append(
                f"다운로드 명령을 PATH에서 찾을 수 없습니다: {self.downloader.command[0]}"
            )

        if not self.paths.download_dir:
            warnings.append("download_dir가 비어 있습니다. 현재 디렉토리에 저장합니다.")

        channel_list = Path(self.paths.channel_list).expanduser()
        if not channel_list.exists():
            warnings.append(f"채널 목록 파일을 찾을 수 없습니다: {channel_list}")

        if self.sync.staleness_hours <= 0:
            warnings.append("staleness_hours가 0 이하입니다. 매번 피드를 다시 받습니다.")

        if self.sync.since:
            try:
                parse_timestamp(self.sync.since)
            except ValueError:
                warnings.append(f"since 값을 해석할 수 없습니다: {self.sync.since}")

        return warnings
