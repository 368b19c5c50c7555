"""환경 설정 검증 스크립트

Usage:
    python -m ytrss.check_setup [설정 파일 경로]
"""

from __future__ import annotations

import os
import shutil
import sys
from pathlib import Path

from ytrss.collector.channel_list import load_channel_list
from ytrss.config import DEFAULT_CONFIG_DIR, Settings
from ytrss.errors import ConfigError


def check_python_version() -> bool:
    """Python 버전 확인"""
    version = sys.version_info
    ok = version >= (3, 11)
    status = "✅" if ok else "❌"
    print(f"{status} Python {version.major}.{version.minor}.{version.micro} ... {'OK' if ok else 'Python 3.11+ 필요'}")
    return ok


def check_download_command(command: list[str]) -> bool:
    """다운로드 프로그램 설치 확인"""
    if not command:
        print("❌ Download command ... 미설정")
        return False

    found = shutil.which(command[0])
    if found:
        print(f"✅ Download command ... OK ({found})")
        return True
    print(f"❌ Download command ... {command[0]} 없음 (pip install yt-dlp)")
    return False


def check_config_file(config_path: str | None) -> bool:
    """설정 파일 존재 확인"""
    if config_path is None:
        print(f"⚠️  Config file ... 미지정 (기본값 사용, 예: {DEFAULT_CONFIG_DIR}/settings.yaml)")
        return True

    exists = Path(config_path).expanduser().exists()
    status = "✅" if exists else "❌"
    msg = "OK" if exists else f"파일 없음 ({config_path})"
    print(f"{status} Config file ... {msg}")
    return exists


def check_channel_list(path: str) -> bool:
    """채널 목록 확인"""
    try:
        channels = load_channel_list(path)
    except ConfigError as e:
        print(f"❌ Channel list ... {e}")
        return False

    if not channels:
        print(f"⚠️  Channel list ... 비어 있음 ({path})")
        return False
    print(f"✅ Channel list ... OK ({len(channels)}개 채널)")
    return True


def check_writable_dir(label: str, directory: str) -> bool:
    """디렉토리 쓰기 권한 확인"""
    path = Path(directory).expanduser()
    target = path if path.exists() else path.parent
    while not target.exists() and target != target.parent:
        target = target.parent

    ok = os.access(target, os.W_OK)
    status = "✅" if ok else "❌"
    msg = "OK" if ok else f"쓰기 불가 ({target})"
    print(f"{status} {label} ... {msg}")
    return ok


def main(argv: list[str] | None = None) -> None:
    """모든 설정 항목을 검증합니다."""
    argv = sys.argv[1:] if argv is None else argv
    config_path = argv[0] if argv else None

    print("=" * 50)
    print("  ytrss - 환경 설정 검증")
    print("=" * 50)
    print()

    results = []

    results.append(check_python_version())
    results.append(check_config_file(config_path))
    print()

    try:
        settings = Settings.load(config_path=config_path)
    except FileNotFoundError:
        print("⚠️  설정 파일 없음 - 세부 검증 스킵")
        settings = None
    except ConfigError as e:
        print(f"❌ Config file ... {e}")
        results.append(False)
        settings = None

    if settings is not None:
        results.append(check_download_command(settings.downloader.command))
        results.append(check_channel_list(settings.paths.channel_list))
        results.append(check_writable_dir("Cache directory", settings.paths.cache_dir))
        results.append(check_writable_dir("Record directory", settings.paths.record_dir))
        results.append(check_writable_dir("Download directory", settings.paths.download_dir))

    print()
    print("=" * 50)

    if all(results):
        print("✅ All checks passed!")
    else:
        failed = results.count(False)
        print(f"⚠️  {failed}개 항목에 주의가 필요합니다.")

    print("=" * 50)


if __name__ == "__main__":
    main()
