"""로깅 설정 - 콘솔 + (선택) 회전 로그 파일"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FILE_NAME = "ytrss.log"
LOG_FILE_MAX_BYTES = 1_000_000
LOG_FILE_BACKUPS = 3

LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)-24s | %(message)s"


def setup_logger(
    name: str = "ytrss",
    level: str = "INFO",
    log_dir: str | None = None,
) -> logging.Logger:
    """ytrss 루트 로거를 설정합니다.

    cron 등으로 같은 프로세스에서 여러 번 호출되어도 핸들러가 쌓이지 않도록
    기존 핸들러를 교체하므로, 마지막 호출의 level/log_dir가 적용됩니다.

    Args:
        name: 로거 이름
        level: 로그 레벨 이름 (알 수 없는 값이면 INFO)
        log_dir: 로그 파일 디렉토리 (None이면 콘솔만 출력)
    """
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # 2026-10-18 08:00:05 | INFO    | ytrss.sync               | ▶ Channel
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_dir:
        log_path = Path(log_dir).expanduser()
        log_path.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path / LOG_FILE_NAME,
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUPS,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(module_name: str) -> logging.Logger:
    """모듈별 하위 로거 (예: "collector.cache" → ytrss.collector.cache)"""
    return logging.getLogger(f"ytrss.{module_name}")
